# Database package: lazy engine/session and ORM models
