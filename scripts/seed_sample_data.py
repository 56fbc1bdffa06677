#!/usr/bin/env python3
"""Seed sample collections, colors and videos for local development."""
import sys
import os
import uuid

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from app.extensions import db
from app.models.catalog import Collection
from app.models.variant import ColorImage
from app.models.video import Video
from app.services import catalog_service

app = create_app()

SAMPLE_TYPES = [
    {
        "name": "Voile",
        "name_ar": "فوال",
        "collections": [
            {
                "name": "Azur",
                "description": "Light voile in sea tones",
                "colors": [
                    ("Sky", "#87CEEB", "25.00", None),
                    ("Navy", "#1B2A4A", "27.50", "10"),
                    ("Turquoise", "#40E0D0", "25.00", None),
                ],
            },
            {
                "name": "Sahara",
                "description": "Desert palette",
                "colors": [
                    ("Sand", "#C2B280", "30.00", None),
                    ("Terracotta", "#E2725B", "32.00", "15"),
                ],
            },
        ],
    },
    {
        "name": "Gaz",
        "name_ar": "قاز",
        "collections": [
            {
                "name": "Nuit",
                "description": "Evening gaz",
                "colors": [
                    ("Black", "#000000", "22.00", None),
                    ("Plum", "#8E4585", "24.00", None),
                ],
            },
        ],
    },
]


def seed():
    with app.app_context():
        if Collection.query.first():
            print("Collections already exist, skipping seed.")
            return

        total = 0
        for item in SAMPLE_TYPES:
            melhaf_type = catalog_service.create_type(
                name=item["name"], name_ar=item["name_ar"], admin_id="seed"
            )
            for spec in item["collections"]:
                result = catalog_service.create_collection_with_variants(
                    {
                        "type_id": str(melhaf_type.id),
                        "name": spec["name"],
                        "description": spec["description"],
                    },
                    [
                        {
                            "name": name,
                            "color_code": code,
                            "price": price,
                            "discount": discount,
                            "sort_order": j,
                            "inventory": {"available": 20, "reorder_point": 5},
                        }
                        for j, (name, code, price, discount) in enumerate(spec["colors"])
                    ],
                    admin_id="seed",
                )

                # Placeholder media records (no real upload)
                for created in result.variants:
                    db.session.add(
                        ColorImage(
                            variant_id=created.id,
                            url=f"https://placehold.co/600x800?text={created.ean}",
                            position=0,
                        )
                    )
                db.session.add(
                    Video(
                        id=uuid.uuid4(),
                        collection_id=result.collection_id,
                        title=f"{spec['name']} lookbook",
                        video_url=f"https://placehold.co/videos/{result.collection_id}.mp4",
                        duration=30,
                    )
                )
                db.session.commit()

                total += 1
                eans = ", ".join(v.ean for v in result.variants)
                print(f"  Created {spec['name']}: {eans}")

        print(f"\nSeeded {total} collections.")


if __name__ == "__main__":
    seed()
