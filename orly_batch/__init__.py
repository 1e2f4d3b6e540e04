from .app import main
from .batch import BatchCoordinator
from .processor import ItemProcessor

__all__ = [
    "main",
    "BatchCoordinator",
    "ItemProcessor",
]
