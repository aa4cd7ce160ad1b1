from sqlmodel import Session, select
from nyonjo.core.clock import utcnow
from nyonjo.db.session import engine, create_db_and_tables
from nyonjo.models.blog import BlogPost, MediaType
from nyonjo.models.product import Product
from nyonjo.services.featured import FeaturedService

def seed_data():
    print("Creating database and tables...")
    create_db_and_tables()

    with Session(engine) as session:
        # Check if products already exist to avoid duplicates
        existing_products = session.exec(select(Product)).all()
        if existing_products:
            print(f"Database already contains {len(existing_products)} products. Skipping seed.")
            return

        print("Seeding initial products...")
        products = [
            Product(
                name="Moringa Leaf Powder",
                category="Superfoods",
                short_description="Stone-ground moringa leaves for daily energy.",
                description="Shade-dried moringa leaves ground into a fine powder. Stir into porridge, juice or tea.",
                benefits=["Rich in iron and vitamin C", "Supports steady energy", "Gentle on digestion"],
                usage_instructions="Mix one teaspoon into food or drink once a day.",
                images=["/images/moringa.webp"],
                price=1200.00,
            ),
            Product(
                name="Hibiscus Calm Tea",
                category="Herbal Teas",
                short_description="Tart hibiscus flowers blended with lemongrass.",
                description="Whole hibiscus calyces and lemongrass for a caffeine-free evening brew.",
                benefits=["Caffeine free", "Naturally high in antioxidants"],
                usage_instructions="Steep one tablespoon in hot water for five minutes.",
                images=["/images/hibiscus.webp"],
                price=850.00,
            ),
            Product(
                name="Shea & Baobab Body Butter",
                category="Skin Care",
                short_description="Whipped raw shea butter with baobab oil.",
                description="Unrefined shea butter whipped with cold-pressed baobab seed oil for dry skin.",
                benefits=["Deeply moisturising", "Fragrance free"],
                usage_instructions="Massage into damp skin after bathing.",
                images=["/images/shea-baobab.webp"],
                price=1500.00,
            ),
            Product(
                name="Neem Clarifying Soap",
                category="Skin Care",
                short_description="Cold-process soap with neem leaf and charcoal.",
                description="Handmade neem and activated charcoal bar for oily and blemish-prone skin.",
                benefits=["Cleanses without stripping", "Handmade in small batches"],
                usage_instructions="Lather with warm water, rinse well.",
                images=["/images/neem-soap.webp"],
                price=450.00,
                in_stock=False,
            ),
        ]

        for product in products:
            session.add(product)

        post = BlogPost(
            title="Welcome to the Nyonjo Herbs journal",
            content="Stories about the plants we grow, the women who harvest them and the rituals they fit into.",
            category="Wellness",
            media_type=MediaType.ARTICLE,
            published=True,
            published_at=utcnow(),
        )
        post.excerpt = post.content[:150] + "..."
        session.add(post)
        session.commit()

        featured = FeaturedService(session)
        for product in products[:2]:
            featured.set_featured(Product, product.id, True)
        featured.set_featured(BlogPost, post.id, True)

        print(f"Successfully seeded {len(products)} products and 1 blog post!")

if __name__ == "__main__":
    seed_data()
