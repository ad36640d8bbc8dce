"""
Database models (vector store)
"""
from app.models.relationship_model import TableRelationship

__all__ = [
    "TableRelationship",
]
