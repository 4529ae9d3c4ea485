from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable, Optional, Union

import pytest

Content = Union[str, bytes, None]


def _write_tree(root: Path, layout: dict[str, Content]) -> Path:
    """Create files (str/bytes content) and directories (None) under root."""
    root.mkdir(parents=True, exist_ok=True)
    for rel_path, content in layout.items():
        target = root / rel_path
        if content is None:
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding='utf-8')
    return root


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[str, Optional[dict[str, Content]]], Path]:
    def factory(name: str, layout: Optional[dict[str, Content]] = None) -> Path:
        return _write_tree(tmp_path / name, layout or {})
    return factory


@pytest.fixture
def symlinks_supported(tmp_path: Path) -> None:
    probe = tmp_path / "symlink-probe"
    try:
        os.symlink("target", probe)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported on this platform")
    probe.unlink()


requires_permissions = pytest.mark.skipif(
    sys.platform == 'win32' or (hasattr(os, 'geteuid') and os.geteuid() == 0),
    reason="permission bits are not enforced for this user/platform",
)
