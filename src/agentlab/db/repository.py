"""Repository pattern for all AgentLab database operations.

Single interface for: projects, documents (chunks), embeddings and
nearest-neighbour search. Cosine distance is computed by sqlite-vec's
``vec_distance_cosine`` over the stored float32 BLOBs.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Sequence

from agentlab.db.models import Document, Project, SearchResult
from agentlab.db.vectors import blob_dimensions, serialize_vector


class Repository:
    """Data access layer for all AgentLab database entities.

    Wraps an open sqlite3.Connection. The connection is owned by the caller
    and must be closed after use.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with sqlite-vec loaded and schema
                initialised (see agentlab.db.schema.initialize).
        """
        self._conn = conn

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def upsert_project(self, project: Project) -> None:
        """Insert or replace a project record (idempotent across re-runs)."""
        self._conn.execute(
            """
            INSERT INTO projects (id, title, category, description, tech_stack, keywords)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                title = excluded.title,
                category = excluded.category,
                description = excluded.description,
                tech_stack = excluded.tech_stack,
                keywords = excluded.keywords
            """,
            (
                project.id,
                project.title,
                project.category,
                project.description,
                json.dumps(project.tech_stack),
                json.dumps(project.keywords),
            ),
        )
        self._conn.commit()

    def get_project(self, project_id: str) -> Project | None:
        """Return a project by id, or None if not found."""
        row = self._conn.execute(
            "SELECT id, title, category, description, tech_stack, keywords FROM projects WHERE id = ?",
            (project_id,),
        ).fetchone()
        return _row_to_project(row) if row else None

    def list_projects(self, search: str | None = None) -> list[Project]:
        """Return all projects ordered by id.

        Args:
            search: Optional filter; keeps projects whose title contains it
                (case-insensitive) or whose id contains it.
        """
        rows = self._conn.execute(
            "SELECT id, title, category, description, tech_stack, keywords FROM projects ORDER BY id"
        ).fetchall()
        projects = [_row_to_project(r) for r in rows]
        if search:
            needle = search.lower()
            projects = [
                p for p in projects if needle in p.title.lower() or search in p.id
            ]
        return projects

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def add_document(self, document: Document) -> int:
        """Insert a document chunk. Returns the new row id."""
        cur = self._conn.execute(
            """
            INSERT INTO documents (project_id, file_path, content, chunk_index, language, metadata)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                document.project_id,
                document.file_path,
                document.content,
                document.chunk_index,
                document.language,
                document.metadata,
            ),
        )
        self._conn.commit()
        document.id = cur.lastrowid
        return cur.lastrowid

    def get_document(self, document_id: int) -> Document | None:
        """Return a document by row id, or None if not found."""
        row = self._conn.execute(
            """
            SELECT id, project_id, file_path, content, chunk_index, language, metadata
            FROM documents WHERE id = ?
            """,
            (document_id,),
        ).fetchone()
        return _row_to_document(row) if row else None

    def list_file_documents(self, project_id: str, file_path: str) -> list[Document]:
        """Return the stored chunks of one file, ordered by chunk_index."""
        rows = self._conn.execute(
            """
            SELECT id, project_id, file_path, content, chunk_index, language, metadata
            FROM documents WHERE project_id = ? AND file_path = ?
            ORDER BY chunk_index
            """,
            (project_id, file_path),
        ).fetchall()
        return [_row_to_document(r) for r in rows]

    def delete_file_documents(self, project_id: str, file_path: str) -> int:
        """Delete all chunks of one file. Embeddings cascade. Returns rows deleted."""
        cur = self._conn.execute(
            "DELETE FROM documents WHERE project_id = ? AND file_path = ?",
            (project_id, file_path),
        )
        self._conn.commit()
        return cur.rowcount

    def count_documents(self, project_id: str | None = None) -> int:
        """Return the number of stored documents, optionally for one project."""
        if project_id is None:
            return self._conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]
        return self._conn.execute(
            "SELECT COUNT(*) FROM documents WHERE project_id = ?", (project_id,)
        ).fetchone()[0]

    # ------------------------------------------------------------------
    # Embeddings
    # ------------------------------------------------------------------

    def list_unembedded_documents(self, limit: int | None = None) -> list[Document]:
        """Return documents that have no embedding yet, oldest first."""
        sql = """
            SELECT d.id, d.project_id, d.file_path, d.content, d.chunk_index,
                   d.language, d.metadata
            FROM documents d
            LEFT JOIN embeddings e ON d.id = e.document_id
            WHERE e.id IS NULL
            ORDER BY d.id
        """
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)
        return [_row_to_document(r) for r in self._conn.execute(sql, params).fetchall()]

    def add_embedding(self, document_id: int, vector: Sequence[float]) -> None:
        """Store the embedding for *document_id*.

        Raises:
            ValueError: If the vector is empty or all zeros, or its
                dimensionality differs from the embeddings already stored.
        """
        if not vector:
            raise ValueError("Cannot store an empty embedding")
        if not any(vector):
            raise ValueError("Cannot store an all-zero embedding (no cosine direction)")
        self._check_dimensions(len(vector))
        self._conn.execute(
            "INSERT INTO embeddings (document_id, embedding) VALUES (?, ?)",
            (document_id, serialize_vector(vector)),
        )
        self._conn.commit()

    def embedding_dimensions(self) -> int | None:
        """Return the dimensionality of stored embeddings, or None if there are none."""
        row = self._conn.execute("SELECT embedding FROM embeddings LIMIT 1").fetchone()
        return blob_dimensions(row["embedding"]) if row else None

    def count_embeddings(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM embeddings").fetchone()[0]

    def search_nearest(self, vector: Sequence[float], limit: int = 5) -> list[SearchResult]:
        """Nearest-neighbour search over embedded documents.

        Documents without an embedding never match (inner join). Rows whose
        cosine distance is undefined (a zero vector on either side) are left
        out. Results are ordered by ascending cosine distance.

        Raises:
            ValueError: If *vector* does not match the stored dimensionality.
        """
        self._check_dimensions(len(vector))
        rows = self._conn.execute(
            """
            SELECT * FROM (
                SELECT d.id, d.content, d.file_path, d.project_id,
                       vec_distance_cosine(e.embedding, ?) AS distance
                FROM embeddings e
                JOIN documents d ON e.document_id = d.id
            )
            WHERE distance IS NOT NULL
            ORDER BY distance ASC
            LIMIT ?
            """,
            (serialize_vector(vector), limit),
        ).fetchall()
        return [
            SearchResult(
                id=r["id"],
                project_id=r["project_id"],
                file_path=r["file_path"],
                content=r["content"],
                distance=float(r["distance"]),
            )
            for r in rows
        ]

    def _check_dimensions(self, dims: int) -> None:
        stored = self.embedding_dimensions()
        if stored is not None and stored != dims:
            raise ValueError(
                f"Embedding dimensionality mismatch: store holds {stored}-d vectors, got {dims}"
            )


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _row_to_project(row: sqlite3.Row) -> Project:
    return Project(
        id=row["id"],
        title=row["title"],
        category=row["category"],
        description=row["description"],
        tech_stack=json.loads(row["tech_stack"]),
        keywords=json.loads(row["keywords"]),
    )


def _row_to_document(row: sqlite3.Row) -> Document:
    return Document(
        id=row["id"],
        project_id=row["project_id"],
        file_path=row["file_path"],
        content=row["content"],
        chunk_index=row["chunk_index"],
        language=row["language"],
        metadata=row["metadata"],
    )
