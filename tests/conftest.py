import sys
from pathlib import Path

import pytest

# run from any directory: the packages live at the repository root
REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def gsb_path(tmp_path):
    """Single-grid binary NTv2 file (see tests.ntv2_builders.parent_grid)."""
    from tests.ntv2_builders import parent_grid, write_grid

    return write_grid(tmp_path, "grid.gsb", [parent_grid()])
