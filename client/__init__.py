from .storage import JsonFileStorage, MemoryStorage
from .cart import CartStore
from .auth import AuthStore
