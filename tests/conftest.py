import sys
from pathlib import Path

import pytest
from PIL import Image

# Ensure the project root is on sys.path for direct pytest runs
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from paperback.core.book_config import BookConfig, CoverSpec  # noqa: E402


@pytest.fixture
def small_config():
    return BookConfig(output_width=200, output_height=160, output_border=20)


@pytest.fixture
def small_cover_spec():
    return CoverSpec(dpi=10)


@pytest.fixture
def wraparound_cover():
    """10dpi の全面カバー: 裏表紙(青) 60px + 背表紙(緑) 10px + 表紙(赤) 60px, 高さ 90px。"""
    img = Image.new("RGB", (130, 90), (0, 0, 200))
    img.paste((0, 180, 0), (60, 0, 70, 90))
    img.paste((220, 0, 0), (70, 0, 130, 90))
    return img
