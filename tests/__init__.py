from __future__ import annotations

# Ensure repo-local apps are importable in tests without installing packages.
import sys
from pathlib import Path

repo_root = Path(__file__).resolve().parents[1]
api_root = repo_root / "apps" / "api"

if str(api_root) not in sys.path:
    sys.path.insert(0, str(api_root))
