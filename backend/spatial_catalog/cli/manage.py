"""CLI utilities for catalog database maintenance."""

# purpose: give maintainers commands to create the schema and seed controlled vocabularies
# status: active
# depends_on: backend.spatial_catalog.database, services.vocabularies

from __future__ import annotations

import typer

from ..database import Base, SessionLocal, engine
from ..services import vocabularies

app = typer.Typer(help="Spatial test catalog maintenance commands")


@app.command("create-schema")
def create_schema() -> None:
    """Create any missing tables (development databases; production uses Alembic)."""

    from .. import models  # noqa: F401  registers tables on Base.metadata

    Base.metadata.create_all(bind=engine)
    typer.echo("Schema ready")


@app.command("seed-vocabularies")
def seed_vocabularies() -> None:
    """Insert the bundled ability, platform, modality and population terms."""

    db = SessionLocal()
    try:
        created = vocabularies.seed_vocabularies(db)
    finally:
        db.close()
    for facet, count in created.items():
        typer.echo(f"{facet}: {count} new term(s)")


if __name__ == "__main__":
    app()
