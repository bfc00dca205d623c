"""Archive, delete, sort and restructure operations on markdown documents."""

from mdarchive.archiving.archiver import Archiver
from mdarchive.archiving.date_tree import DateLevel, DateTreeResolver
from mdarchive.archiving.list_to_heading import ListToHeadingTransformer
from mdarchive.archiving.metadata import MetadataService
from mdarchive.archiving.sorter import TaskListSorter

__all__ = [
    "Archiver",
    "DateLevel",
    "DateTreeResolver",
    "ListToHeadingTransformer",
    "MetadataService",
    "TaskListSorter",
]
