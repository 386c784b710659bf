import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from hostmdx.session import BuildSession


@pytest.fixture
def site(tmp_path):
    """Empty input and output directories side by side."""
    input_root = tmp_path / "site"
    output_root = tmp_path / "out"
    input_root.mkdir()
    output_root.mkdir()
    return input_root, output_root


@pytest.fixture
def make_session(site):
    def factory(**kwargs):
        input_root, output_root = site
        return BuildSession(input_root=input_root, output_root=output_root, **kwargs)

    return factory
