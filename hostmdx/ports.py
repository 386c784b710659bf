import socket

PORT_SEARCH_SPAN = 100


def port_is_free(port, host=""):
    # SO_REUSEADDR is left off so a port held by a listener is reported busy.
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_port(start, maximum, host="", probe=port_is_free):
    """Return the first port in ``start..maximum`` that can be bound, or None.

    The probe socket is closed before returning, so another process can still
    take the port before the real listener binds it.
    """
    for port in range(start, maximum + 1):
        if probe(port, host):
            return port
    return None
