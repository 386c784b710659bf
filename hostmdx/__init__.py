"""Build a website from a tree of mdx documents and host it while editing."""

__all__ = ["create_session", "build_site", "RebuildCoordinator", "serve"]


def __getattr__(name):
    if name == "create_session":
        from .session import create_session

        return create_session
    if name == "build_site":
        from .site_builder import build_site

        return build_site
    if name == "RebuildCoordinator":
        from .rebuild import RebuildCoordinator

        return RebuildCoordinator
    if name == "serve":
        from .dev_server import serve

        return serve
    raise AttributeError(name)
