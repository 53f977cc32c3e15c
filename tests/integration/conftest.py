import os
from collections.abc import Generator
from pathlib import Path

import pytest

from app.config.settings import Settings
from app.database.connection import Database
from app.database.models import DocumentRecord
from app.database.repositories.document_repository import DocumentRepository
from app.database.repositories.extraction_repository import ExtractionRepository
from app.database.repositories.job_repository import JobRepository

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "app" / "database" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docinsight_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def db(test_settings: Settings) -> Generator[Database, None, None]:
    try:
        database = Database.from_settings(test_settings)
        with database.connection() as conn:
            conn.execute(SCHEMA_PATH.read_text())
            conn.commit()
    except Exception as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield database
    finally:
        database.close()


@pytest.fixture
def doc_repo(db: Database) -> DocumentRepository:
    return DocumentRepository(db)


@pytest.fixture
def job_repo(db: Database, test_settings: Settings) -> JobRepository:
    return JobRepository(db, test_settings.max_job_attempts)


@pytest.fixture
def extraction_repo(db: Database) -> ExtractionRepository:
    return ExtractionRepository(db)


@pytest.fixture
def integration_cleanup(db: Database) -> Generator[list[str], None, None]:
    """Document ids to delete after the test; jobs and extractions cascade."""
    cleanup: list[str] = []
    yield cleanup
    if not cleanup:
        return
    with db.connection() as conn:
        with conn.cursor() as cur:
            for document_id in cleanup:
                cur.execute("DELETE FROM documents WHERE id = %s", (document_id,))
        conn.commit()


@pytest.fixture
def seed_document(
    doc_repo: DocumentRepository,
    integration_cleanup: list[str],
) -> DocumentRecord:
    document = doc_repo.create(
        session_id="integration-session",
        filename="bill.pdf",
        mime="application/pdf",
        size_bytes=1024,
        ttl_days=7,
    )
    integration_cleanup.append(document.id)
    doc_repo.set_storage_path(document.id, f"anon/{document.id}/original.pdf")
    return doc_repo.find_by_id(document.id)
