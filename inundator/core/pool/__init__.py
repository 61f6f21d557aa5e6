from .connection_pool import ConnectionPool as ConnectionPool
