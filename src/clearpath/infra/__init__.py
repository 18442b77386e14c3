"""Infrastructure adapters backed by SQLModel."""
