from ._base import CliAdapter
from .kubectl import Kubectl

__all__ = ["CliAdapter", "Kubectl"]
