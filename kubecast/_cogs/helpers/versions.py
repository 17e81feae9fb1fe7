"""
The version of the installed distribution, if it is installed at all.
"""
import importlib.metadata
from typing import Optional

version: Optional[str]
try:
    version = importlib.metadata.version('kubecast')
except importlib.metadata.PackageNotFoundError:
    version = None
