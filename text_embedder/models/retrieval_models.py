"""
text_embedder/models/retrieval_models.py

Pydantic DTOs for the in-process retrieval flow.
"""

from typing import List

from pydantic import BaseModel, Field


class RankedDocument(BaseModel):
    """
    One candidate document scored against a query.

        {
            "index": 1,
            "document": "The giant panda is a bear species endemic to China.",
            "score": 0.83,
            "distance": 0.17
        }
    """

    index: int = Field(description="Position of the document in the caller's list.")
    document: str
    score: float = Field(description="Cosine similarity, higher is closer.")
    distance: float = Field(description="Cosine distance, 1 - score.")


class RetrievalResponse(BaseModel):
    """Documents ordered from closest to farthest."""

    query: str
    results: List[RankedDocument]
