"""
Idempotent bootstrap data: each table is filled only while it is empty.
Run from the app lifespan when SEED_DB=true.
"""

from loguru import logger
from tortoise.models import Model

from makeeasy.models import (
    About,
    AddOn,
    AddOnType,
    Banner,
    Category,
    Location,
    Product,
    Service,
    User,
)
from makeeasy.roles import Role
from makeeasy.security import hash_password


def _city(
    city: str, deposit: int, delivery: int, stock: int, rents: dict[int, int]
) -> dict:
    return {
        "city": city,
        "deposit": str(deposit),
        "delivery_charge": str(delivery),
        "stock": stock,
        "available": True,
        "tenures": [
            {"months": months, "monthly_rent": str(rent)}
            for months, rent in rents.items()
        ],
    }


CATEGORIES = [
    {"name": "Electronics", "icon": "Tv", "key": "electronics", "path": "electronics"},
    {"name": "Furniture", "icon": "Sofa", "key": "furniture", "path": "furniture"},
    {"name": "Vehicles", "icon": "Car", "key": "vehicles", "path": "vehicles"},
    {"name": "Construction", "icon": "Building", "key": "construction", "path": "construction"},
    {"name": "Home Services", "icon": "Home", "key": "home-services", "path": "home-services"},
    {"name": "Professional Services", "icon": "Briefcase", "key": "professional", "path": "professional"},
]

PRODUCTS = [
    {
        "title": "Refrigerator",
        "price": 499,
        "location": "Kanpur",
        "category": "electronics",
        "specifications": {"capacity": "260L", "doors": 2},
        "city_pricing": [
            _city("Kanpur", 2000, 299, 10, {3: 899, 6: 799, 12: 699}),
            _city("Lucknow", 2000, 349, 4, {6: 849, 12: 749}),
        ],
    },
    {
        "title": "Washing Machine",
        "price": 499,
        "location": "Kanpur",
        "category": "electronics",
        "specifications": {"capacity": "7kg", "type": "front load"},
        "city_pricing": [_city("Kanpur", 1500, 299, 6, {3: 799, 6: 699, 12: 599})],
    },
    {
        "title": "Wooden Sofa Set",
        "price": 599,
        "location": "Kanpur",
        "category": "furniture",
        "city_pricing": [_city("Kanpur", 2500, 499, 3, {6: 999, 12: 849})],
        "early_closure_charge": 750,
    },
    {"title": "Office Chair", "price": 249, "location": "Kanpur", "category": "furniture"},
    {"title": "Drill Machine", "price": 200, "location": "Kanpur", "category": "construction"},
    {"title": "CA Services", "price": 599, "location": "Delhi", "category": "professional"},
]

SERVICES = [
    ("Plumbing Services", "Plumbing solutions for water and drainage needs.", "Droplet", 299),
    ("Electrical Services", "Electrical work by certified electricians.", "Zap", 399),
    ("Home Painting", "Interior and exterior painting.", "PaintBucket", 899),
    ("AC Repair", "Air conditioner repair and maintenance.", "Wind", 349),
    ("Cleaning Services", "Home and office cleaning.", "Sparkles", 499),
    ("Pest Control", "Pest control for homes and businesses.", "Bug", 599),
]

ADD_ONS = [
    {
        "name": "Damage Protection",
        "description": "Covers accidental damage up to the listed amount.",
        "type": AddOnType.DAMAGE_PROTECTION,
        "monthly_charge": 99,
        "inclusions": ["Accidental damage", "Liquid spills"],
        "exclusions": ["Theft", "Intentional damage"],
        "max_coverage_amount": 10000,
        "display_order": 1,
    },
    {
        "name": "Installation",
        "description": "One-time professional installation at delivery.",
        "type": AddOnType.SERVICE_PLAN,
        "monthly_charge": 0,
        "one_time_charge": 199,
        "display_order": 2,
    },
]

BANNERS = [
    {
        "title": "Welcome to MakeEasy",
        "subtitle": "Rent Anything, Book Any Service",
        "image": "https://images.unsplash.com/photo-1556912172-45b7abe8b7e1?w=1200&h=600&fit=crop",
        "link": "/products",
        "button_text": "Explore Products",
        "display_order": 1,
    },
    {
        "title": "Quality Furniture Rentals",
        "subtitle": "Flexible plans for homes and offices",
        "image": "https://images.unsplash.com/photo-1555041469-a586c61ea9bc?w=1200&h=600&fit=crop",
        "link": "/products?category=furniture",
        "button_text": "Browse Furniture",
        "display_order": 2,
    },
]

LOCATIONS = [
    ("Mumbai", "Mumbai", "Maharashtra", "Building2", False),
    ("Pune", "Pune", "Maharashtra", "Building", False),
    ("New Delhi", "New Delhi", "Delhi", "Landmark", False),
    ("Bangalore", "Bengaluru Urban", "Karnataka", "Building2", False),
    ("Hyderabad", "Hyderabad", "Telangana", "Building", False),
    ("Kanpur", "Kanpur Nagar", "Uttar Pradesh", "MapPin", False),
    ("Lucknow", "Lucknow", "Uttar Pradesh", "Landmark", True),
]

ABOUT = {
    "mission": {
        "title": "Our Mission",
        "subtitle": "Simplifying your life through seamless service delivery",
    },
    "story": {
        "heading": "Our Story",
        "description": "MakeEasy is a platform for renting products and booking services.",
    },
    "core_values": [
        {"title": "Customer First", "description": "Customer needs come first."},
        {"title": "Trust & Reliability", "description": "Transparent, dependable service."},
    ],
    "journey": [{"year": "2024", "description": "MakeEasy platform launched."}],
    "community": {"heading": "Join the MakeEasy Community"},
}


async def _fill(model: type[Model], rows: list[dict]) -> None:
    if await model.exists():
        return
    await model.bulk_create([model(**row) for row in rows])
    logger.info("Seeded {} {} rows", len(rows), model.__name__)


async def bootstrap() -> None:
    await _fill(
        User,
        [
            {
                "name": "Admin User",
                "email": "admin@makeeasy.com",
                "password_hash": hash_password("admin123"),
                "role": Role.ADMIN,
            },
            {
                "name": "Regular User",
                "email": "user@makeeasy.com",
                "password_hash": hash_password("user123"),
                "role": Role.USER,
            },
        ],
    )
    await _fill(Category, CATEGORIES)
    await _fill(Product, PRODUCTS)
    await _fill(
        Service,
        [
            {"title": t, "description": d, "icon": i, "price": p}
            for t, d, i, p in SERVICES
        ],
    )
    await _fill(AddOn, ADD_ONS)
    await _fill(Banner, BANNERS)
    await _fill(
        Location,
        [
            {
                "city": city,
                "district": district,
                "state": state,
                "icon": icon,
                "is_new": is_new,
                "display_order": i,
            }
            for i, (city, district, state, icon, is_new) in enumerate(LOCATIONS, start=1)
        ],
    )
    await _fill(About, [ABOUT])
