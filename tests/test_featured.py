import pytest
from sqlmodel import select

from nyonjo.core.exceptions import NotFoundError, ValidationError
from nyonjo.models.blog import BlogPost
from nyonjo.models.product import Product
from nyonjo.models.sisterhood import SisterhoodPost
from nyonjo.services.featured import FeaturedService, clear_if_ineligible
from nyonjo.services.product import ProductService


def make_product(session, name, in_stock=True):
    product = Product(name=name, category="Teas", price=10.0, in_stock=in_stock)
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def make_blog_post(session, title, published=True):
    post = BlogPost(title=title, content="Body", published=published)
    session.add(post)
    session.commit()
    session.refresh(post)
    return post


def featured_ids(session, model):
    return [row.id for row in session.exec(select(model).where(model.featured == True))]  # noqa: E712


def test_product_cap_unfeatures_oldest(session):
    service = FeaturedService(session)
    first, second, third = (make_product(session, n) for n in ("Moringa", "Hibiscus", "Neem"))

    service.set_featured(Product, first.id, True)
    service.set_featured(Product, second.id, True)
    item, displaced = service.set_featured(Product, third.id, True)

    assert item.featured is True
    assert [p.id for p in displaced] == [first.id]
    assert sorted(featured_ids(session, Product)) == sorted([second.id, third.id])


def test_cap_holds_over_any_toggle_sequence(session):
    service = FeaturedService(session)
    products = [make_product(session, f"Herb {i}") for i in range(5)]

    sequence = [0, 1, 2, 3, 1, 4, 0, 2, 2, 3]
    for index in sequence:
        service.set_featured(Product, products[index].id, True)
        assert len(featured_ids(session, Product)) <= 2
    service.set_featured(Product, products[2].id, False)
    assert len(featured_ids(session, Product)) <= 2


def test_refeaturing_an_already_featured_item_displaces_nothing(session):
    service = FeaturedService(session)
    first = make_product(session, "Moringa")
    second = make_product(session, "Hibiscus")
    service.set_featured(Product, first.id, True)
    service.set_featured(Product, second.id, True)

    _, displaced = service.set_featured(Product, first.id, True)

    assert displaced == []
    assert sorted(featured_ids(session, Product)) == sorted([first.id, second.id])


def test_blog_cap_is_one(session):
    service = FeaturedService(session)
    old = make_blog_post(session, "Old")
    new = make_blog_post(session, "New")

    service.set_featured(BlogPost, old.id, True)
    _, displaced = service.set_featured(BlogPost, new.id, True)

    assert [p.id for p in displaced] == [old.id]
    assert featured_ids(session, BlogPost) == [new.id]


def test_out_of_stock_product_cannot_be_featured(session):
    product = make_product(session, "Neem", in_stock=False)

    with pytest.raises(ValidationError) as exc:
        FeaturedService(session).set_featured(Product, product.id, True)

    assert exc.value.message == "Only in-stock products can be featured"
    assert featured_ids(session, Product) == []


def test_draft_post_cannot_be_featured(session):
    post = make_blog_post(session, "Draft", published=False)

    with pytest.raises(ValidationError) as exc:
        FeaturedService(session).set_featured(BlogPost, post.id, True)

    assert exc.value.message == "Only published posts can be featured on the homepage"


def test_hidden_community_post_cannot_be_featured(session):
    post = SisterhoodPost(username="amina", content="Hello sisters", is_approved=False)
    session.add(post)
    session.commit()

    with pytest.raises(ValidationError):
        FeaturedService(session).set_featured(SisterhoodPost, post.id, True)


def test_unknown_item_is_not_found(session):
    with pytest.raises(NotFoundError):
        FeaturedService(session).set_featured(Product, 999, True)


def test_unfeature_ignores_eligibility(session):
    service = FeaturedService(session)
    product = make_product(session, "Moringa")
    service.set_featured(Product, product.id, True)
    product.in_stock = False
    session.add(product)
    session.commit()

    item, _ = service.set_featured(Product, product.id, False)

    assert item.featured is False


def test_clear_if_ineligible():
    product = Product(id=1, name="Moringa", category="Teas", price=1.0, in_stock=False, featured=True)
    assert clear_if_ineligible(product) is True
    assert product.featured is False

    product = Product(id=2, name="Hibiscus", category="Teas", price=1.0, in_stock=True, featured=True)
    assert clear_if_ineligible(product) is False
    assert product.featured is True


def test_marking_out_of_stock_drops_featured_flag(session):
    service = ProductService(session)
    product = make_product(session, "Moringa")
    service.set_featured(product.id, True)

    updated = service.update(product.id, {"in_stock": False})

    assert updated.featured is False


def test_featured_items_skip_ineligible_rows(session):
    product = make_product(session, "Moringa")
    FeaturedService(session).set_featured(Product, product.id, True)
    # Simulate a row that went out of stock behind the service's back
    product.in_stock = False
    session.add(product)
    session.commit()

    assert FeaturedService(session).featured_items(Product) == []


def test_timestamps_are_timezone_aware(session):
    product = Product(name="Moringa", category="Teas", price=10.0)

    assert product.created_at.tzinfo is not None
    assert product.updated_at.tzinfo is not None

    item, _ = FeaturedService(session).set_featured(Product, make_product(session, "Hibiscus").id, True)
    assert item.featured is True
