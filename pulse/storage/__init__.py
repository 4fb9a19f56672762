"""SQLite storage: connection manager, migrations, named queries and the health store."""
