"""Seed script for storefront demo data.

Creates sample categories, products (some with colour/size variants), images
and the store settings row so the checkout flow can be tried end-to-end.

Usage:
    python -m services.storefront_service.seed_data
"""

import asyncio
from decimal import Decimal

from sqlalchemy import func, select

from libs.db.config import AsyncSessionLocal
from services.storefront_service.models import (
    Category,
    Product,
    ProductImage,
    ProductVariant,
    StoreSettings,
)
from services.storefront_service.services.pricing import build_variant_sku


def _variants(base_sku: str, colors: list[str], sizes: list[str], stock: int):
    return [
        ProductVariant(
            color_code=color,
            size_code=size,
            sku=build_variant_sku(base_sku, color, size),
            stock=stock,
        )
        for color in colors
        for size in sizes
    ]


async def seed_store_data():
    async with AsyncSessionLocal() as db:
        print("Seeding storefront data...")

        # Check if data already exists
        existing = await db.execute(select(func.count()).select_from(Category))
        count = existing.scalar()
        if count and count > 0:
            print(f"Store data already exists ({count} categories). Skipping seed.")
            return

        # =========================================================================
        # 1. CATEGORIES
        # =========================================================================
        categories = {
            "figures": Category(
                name="Figures",
                name_ar="مجسمات",
                slug="figures",
                description="Scale figures and collectible statues",
                sort_order=1,
            ),
            "apparel": Category(
                name="Apparel",
                name_ar="ملابس",
                slug="apparel",
                description="Hoodies and tees with your favourite series",
                sort_order=2,
            ),
            "plush": Category(
                name="Plush",
                name_ar="دمى",
                slug="plush",
                description="Soft plush toys",
                sort_order=3,
            ),
            "accessories": Category(
                name="Accessories",
                name_ar="إكسسوارات",
                slug="accessories",
                description="Keychains, posters and desk goodies",
                sort_order=4,
            ),
        }
        db.add_all(categories.values())
        await db.flush()

        # =========================================================================
        # 2. PRODUCTS
        # =========================================================================
        products = [
            Product(
                category_id=categories["figures"].id,
                name="Gojo Satoru 1/7 Scale Figure",
                name_ar="مجسم غوجو ساتورو",
                slug="gojo-satoru-scale-figure",
                description="Jujutsu Kaisen scale figure with display base",
                price=Decimal("899.00"),
                sale_price=Decimal("799.00"),
                sku="FIG-JJK-001",
                stock=12,
                tags=["jujutsu kaisen", "gojo", "figure"],
                tags_ar=["جوجوتسو كايسن"],
                is_featured=True,
                is_on_sale=True,
            ),
            Product(
                category_id=categories["figures"].id,
                name="Luffy Gear 5 Figure",
                slug="luffy-gear-5-figure",
                description="One Piece Gear 5 figure",
                price=Decimal("450.00"),
                sku="FIG-OP-005",
                stock=8,
                tags=["one piece", "luffy"],
                is_new_arrival=True,
            ),
            Product(
                category_id=categories["apparel"].id,
                name="Survey Corps Hoodie",
                name_ar="هودي فيلق الاستطلاع",
                slug="survey-corps-hoodie",
                description="Attack on Titan embroidered hoodie",
                price=Decimal("220.00"),
                sku="APP-AOT-01",
                tags=["attack on titan", "hoodie"],
                has_variants=True,
                is_best_seller=True,
                variants=_variants("APP-AOT-01", ["Black", "Green"], ["M", "L", "XL"], 10),
            ),
            Product(
                category_id=categories["apparel"].id,
                name="Akatsuki Cloud Tee",
                slug="akatsuki-cloud-tee",
                description="Naruto Akatsuki print t-shirt",
                price=Decimal("120.00"),
                sku="APP-NAR-02",
                tags=["naruto", "akatsuki", "t-shirt"],
                has_variants=True,
                variants=_variants("APP-NAR-02", ["Black"], ["S", "M", "L"], 15),
            ),
            Product(
                category_id=categories["plush"].id,
                name="Pikachu Plush 30cm",
                slug="pikachu-plush-30cm",
                description="Official-style Pikachu plush",
                price=Decimal("95.00"),
                sku="PL-PKM-030",
                stock=40,
                tags=["pokemon", "pikachu", "plush"],
                is_featured=True,
            ),
            Product(
                category_id=categories["accessories"].id,
                name="Demon Slayer Keychain Set",
                slug="demon-slayer-keychain-set",
                description="Set of four acrylic keychains",
                price=Decimal("45.00"),
                sku="ACC-KNY-04",
                stock=0,
                tags=["demon slayer", "keychain"],
            ),
        ]
        for product in products:
            product.images = [
                ProductImage(
                    image_url=f"/images/products/{product.slug}.jpg",
                    alt_text=product.name,
                    is_primary=True,
                )
            ]
        db.add_all(products)

        for category in categories.values():
            category.products_count = sum(
                1 for p in products if p.category_id == category.id
            )

        # =========================================================================
        # 3. SETTINGS
        # =========================================================================
        db.add(
            StoreSettings(
                id=1,
                shipping_cost=Decimal("25.00"),
                tax_rate=Decimal("0.15"),
                currency="SAR",
            )
        )

        await db.commit()

        variant_count = sum(len(p.variants) for p in products)
        print("=" * 60)
        print("Store data seeded successfully!")
        print("=" * 60)
        print(f"  Categories: {len(categories)}")
        print(f"  Products: {len(products)}")
        print(f"  Variants: {variant_count}")
        print("=" * 60)


if __name__ == "__main__":
    asyncio.run(seed_store_data())
