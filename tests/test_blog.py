import pytest

from nyonjo.models.blog import MediaType
from nyonjo.services.blog import default_excerpt, detect_media_type
from nyonjo.core.exceptions import ValidationError


def create_post(client, admin_headers, **overrides):
    payload = {"title": "Hibiscus season", "content": "<p>Harvest notes</p>", "published": True}
    payload.update(overrides)
    response = client.post("/api/admin/blog", json=payload, headers=admin_headers)
    assert response.status_code == 200, response.text
    return response.json()["post"]


@pytest.mark.parametrize(
    "cover, requested, expected",
    [
        ("https://cdn.test/clip.MP4", None, MediaType.VIDEO),
        ("https://cdn.test/clip.webm", "image", MediaType.VIDEO),
        ("https://cdn.test/photo.jpg", None, MediaType.IMAGE),
        ("", None, MediaType.ARTICLE),
        ("", "image", MediaType.IMAGE),
    ],
)
def test_detect_media_type(cover, requested, expected):
    assert detect_media_type(cover, requested) == expected


def test_detect_media_type_rejects_unknown():
    with pytest.raises(ValidationError):
        detect_media_type("", "podcast")


def test_default_excerpt_truncates():
    assert default_excerpt("x" * 200) == "x" * 150 + "..."


def test_create_post_defaults(client, admin_headers):
    post = create_post(client, admin_headers, content="A" * 160)

    assert post["excerpt"] == "A" * 150 + "..."
    assert post["category"] == "Wellness"
    assert post["media_type"] == "article"
    assert post["published_at"] is not None


def test_create_post_requires_title_and_content(client, admin_headers):
    response = client.post("/api/admin/blog", json={"title": "Only a title"}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Title and content are required"}


def test_featured_draft_create_saves_nothing(client, admin_headers):
    response = client.post(
        "/api/admin/blog",
        json={"title": "Draft", "content": "Not ready", "published": False, "featured": True},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Only published posts can be featured on the homepage"}
    assert client.get("/api/admin/blog", headers=admin_headers).json() == {"posts": []}


def test_drafts_are_hidden_publicly(client, admin_headers):
    draft = create_post(client, admin_headers, title="Draft", published=False)
    create_post(client, admin_headers, title="Live")

    titles = [p["title"] for p in client.get("/api/blog").json()]
    assert titles == ["Live"]
    assert client.get(f"/api/blog/{draft['id']}").status_code == 404


def test_each_view_increments_count(client, admin_headers):
    post = create_post(client, admin_headers)

    first = client.get(f"/api/blog/{post['id']}").json()
    second = client.get(f"/api/blog/{post['id']}").json()

    assert first["view_count"] == 1
    assert second["view_count"] == 2


def test_patch_publishes_draft(client, admin_headers):
    draft = create_post(client, admin_headers, published=False)

    response = client.patch(f"/api/admin/blog/{draft['id']}", json={"published": True}, headers=admin_headers)

    assert response.status_code == 200
    post = response.json()["post"]
    assert post["published"] is True
    assert post["published_at"] is not None
    assert post["title"] == draft["title"]


def test_unpublishing_drops_featured(client, admin_headers):
    post = create_post(client, admin_headers)
    client.put(f"/api/admin/blog/{post['id']}/featured", json={"featured": True}, headers=admin_headers)
    assert client.get("/api/blog/featured").json()["id"] == post["id"]

    response = client.put(f"/api/admin/blog/{post['id']}", json={"published": False}, headers=admin_headers)

    assert response.json()["post"]["featured"] is False
    assert client.get("/api/blog/featured").json() is None


def test_comments_need_approval(client, admin_headers):
    post = create_post(client, admin_headers)

    response = client.post(
        f"/api/blog/{post['id']}/comments",
        json={"name": "  Wanjiru ", "comment": " Lovely read ", "email": ""},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Comment submitted for approval"
    assert body["comment"]["name"] == "Wanjiru"
    assert body["comment"]["email"] is None
    assert body["comment"]["is_approved"] is False
    assert client.get(f"/api/blog/{post['id']}/comments").json() == {"comments": []}

    comment_id = body["comment"]["id"]
    pending = client.get("/api/admin/blog/comments", params={"approved": False}, headers=admin_headers).json()
    assert [c["id"] for c in pending["comments"]] == [comment_id]
    assert pending["comments"][0]["blog_posts"] == {"title": post["title"]}

    approve = client.put(f"/api/admin/blog/comments/{comment_id}", json={"is_approved": True}, headers=admin_headers)
    assert approve.status_code == 200

    visible = client.get(f"/api/blog/{post['id']}/comments").json()["comments"]
    assert [c["comment"] for c in visible] == ["Lovely read"]


def test_comment_requires_name_and_text(client, admin_headers):
    post = create_post(client, admin_headers)

    response = client.post(f"/api/blog/{post['id']}/comments", json={"name": "   ", "comment": "Hi"})

    assert response.status_code == 400
    assert response.json() == {"error": "Name and comment are required"}


def test_delete_comment(client, admin_headers):
    post = create_post(client, admin_headers)
    comment = client.post(f"/api/blog/{post['id']}/comments", json={"name": "A", "comment": "B"}).json()["comment"]

    assert client.delete(f"/api/admin/blog/comments/{comment['id']}", headers=admin_headers).json() == {"success": True}
    assert client.get(f"/api/admin/blog/comments/{comment['id']}", headers=admin_headers).status_code == 404


def test_reaction_toggle_returns_to_start(client, admin_headers):
    post = create_post(client, admin_headers)
    headers = {"X-Anonymous-Id": "anon_lx2k9abc_q1w2e3r"}
    url = f"/api/blog/{post['id']}/reactions"

    assert client.get(url, headers=headers).json() == {"likeCount": 0, "hasLiked": False}

    liked = client.post(url, headers=headers).json()
    assert liked["action"] == "liked"
    assert liked["likeCount"] == 1
    assert liked["hasLiked"] is True

    unliked = client.post(url, headers=headers).json()
    assert unliked["action"] == "unliked"
    assert client.get(url, headers=headers).json() == {"likeCount": 0, "hasLiked": False}


def test_reactions_are_counted_per_visitor(client, admin_headers):
    post = create_post(client, admin_headers)
    url = f"/api/blog/{post['id']}/reactions"

    client.post(url, headers={"X-Anonymous-Id": "anon_lx2k9abc_aaaaaaa"})
    client.post(url, headers={"X-Anonymous-Id": "anon_lx2k9abc_bbbbbbb"})

    status = client.get(url, headers={"X-Anonymous-Id": "anon_lx2k9abc_ccccccc"}).json()
    assert status == {"likeCount": 2, "hasLiked": False}


def test_delete_post_removes_comments_and_reactions(client, admin_headers):
    post = create_post(client, admin_headers)
    client.post(f"/api/blog/{post['id']}/comments", json={"name": "A", "comment": "B"})
    client.post(f"/api/blog/{post['id']}/reactions", headers={"X-Anonymous-Id": "anon_lx2k9abc_aaaaaaa"})

    response = client.delete(f"/api/admin/blog/{post['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert client.get("/api/admin/blog/comments", headers=admin_headers).json() == {"comments": []}
    assert client.get(f"/api/admin/blog/{post['id']}", headers=admin_headers).status_code == 404
