# repository/namespaces.py
from typing import Final

ROOT: Final[str] = "advisor"

SESSIONS: Final[str] = f"{ROOT}:sessions"
