"""Flask CLI commands for catalog operations."""
import click
from flask import current_app


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables (use `flask db upgrade` on managed databases)."""
        from app.extensions import db

        db.create_all()
        click.echo(
            f"Database initialized: {current_app.config['SQLALCHEMY_DATABASE_URI'].split('://')[0]}"
        )

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seed a demo type and collection with colors (idempotent)."""
        from app.models.catalog import Collection
        from app.services import catalog_service

        if Collection.query.first():
            click.echo("Collections already exist, skipping demo seed.")
            return

        melhaf_type = catalog_service.create_type(
            name="Voile", name_ar="فوال", admin_id="cli"
        )
        demo_collections = [
            ("Azur", [("Sky", "#87CEEB", "25.00"), ("Navy", "#1B2A4A", "27.50")]),
            ("Sahara", [("Sand", "#C2B280", "30.00"), ("Terracotta", "#E2725B", "32.00")]),
            ("Nuit", [("Black", "#000000", "22.00")]),
        ]
        for name, colors in demo_collections:
            result = catalog_service.create_collection_with_variants(
                {"type_id": str(melhaf_type.id), "name": name},
                [
                    {
                        "name": color,
                        "color_code": code,
                        "price": price,
                        "inventory": {"available": 10, "reorder_point": 2},
                    }
                    for color, code, price in colors
                ],
                admin_id="cli",
            )
            click.echo(f"Seeded {name}: " + ", ".join(v.ean for v in result.variants))

    @app.cli.command("create-type")
    @click.option("--name", required=True)
    @click.option("--name-ar", default=None)
    @click.option("--description", default=None)
    def create_type(name, name_ar, description):
        """Create a melhaf type."""
        from app.services import catalog_service

        created = catalog_service.create_type(
            name=name, name_ar=name_ar, description=description, admin_id="cli"
        )
        click.echo(f"Created type {created.id}: {created.name}")

    @app.cli.command("backfill-stock")
    @click.option("--dry-run", is_flag=True, help="Only list colors without stock")
    def backfill_stock(dry_run):
        """Create zero stock records for colors that have none."""
        from app.services import catalog_service
        from app.workers.stock_backfill import ensure_stock_record

        missing = catalog_service.find_variants_missing_stock()
        if not missing:
            click.echo("Every color has a stock record.")
            return

        created = 0
        for variant in missing:
            click.echo(f"  {variant.id} {variant.ean} {variant.name}")
            if not dry_run and ensure_stock_record(variant.id):
                created += 1
        if dry_run:
            click.echo(f"{len(missing)} colors without stock.")
        else:
            click.echo(f"Backfilled {created} of {len(missing)} colors.")

    @app.cli.command("stats")
    def stats():
        """Show catalog statistics."""
        from app.services.catalog_service import get_stats

        s = get_stats()
        for key, count in s.items():
            click.echo(f"  {key}: {count}")
