"""
Shared test fixtures and configuration.
"""

import logging
import shutil
import textwrap
from pathlib import Path

import pytest

from pds4gen.core.config.flags import FlagCatalog, load_flag_catalog


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def conf_dir(project_root: Path) -> Path:
    """The conf/ directory shipped inside the package."""
    return project_root / "pds4gen" / "conf"


@pytest.fixture
def catalog() -> FlagCatalog:
    """The packaged flag catalog."""
    return load_flag_catalog()


@pytest.fixture
def label_file(tmp_path: Path) -> Path:
    """A small, valid PDS3 label."""
    content = textwrap.dedent("""\
        PDS_VERSION_ID = PDS3
        PRODUCT_ID     = "TEST_PRODUCT_001"
        TARGET_NAME    = MARS
        OBJECT         = IMAGE
          LINES        = 512
          LINE_SAMPLES = 256
        END_OBJECT     = IMAGE
        END
    """)
    path = tmp_path / "a.lbl"
    path.write_text(content)
    return path


@pytest.fixture
def template_file(tmp_path: Path) -> Path:
    """A template using top-level and nested label fields."""
    path = tmp_path / "t.xml.j2"
    path.write_text(
        "<product id=\"{{ PRODUCT_ID }}\" target=\"{{ TARGET_NAME }}\" "
        "lines=\"{{ IMAGE.LINES }}\"/>\n"
    )
    return path


@pytest.fixture
def mer_workspace(tmp_path: Path, fixtures_dir: Path) -> Path:
    """Copy of the MER label fixture and its template in a temp dir."""
    for name in ("mer_image.lbl", "image.xml.j2"):
        shutil.copy(fixtures_dir / name, tmp_path / name)
    return tmp_path


@pytest.fixture(autouse=True)
def _restore_logging():
    """setup_logging rewires the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
