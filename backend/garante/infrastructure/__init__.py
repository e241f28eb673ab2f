"""Infrastructure - database session management, structured logging, SQL lookups."""
