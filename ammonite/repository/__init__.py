from .memory import MemoryRepository
from .repository import Repository, RepositoryView, UnitOfWork
from .sql import SQLRepository
