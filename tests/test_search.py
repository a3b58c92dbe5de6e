"""Tests for the skill search page."""

from tests.conftest import login


class TestSearchPage:

    async def test_single_match_renders_one_card_with_badge(self, client, make_user, make_skill, make_profile):
        python = await make_skill("Python")
        assert python.id == 1
        alice = await make_user()
        await make_profile(alice, skills=[python])

        resp = await client.get("/search", params={"q": "Python"})

        assert resp.status_code == 200
        assert resp.text.count('class="card h-100 profile-card"') == 1
        assert '<span class="badge text-bg-secondary skill-badge">Python</span>' in resp.text
        assert 'Found 1 student with "Python"' in resp.text
        assert f'href="/profile/{alice.id}"' in resp.text

    async def test_no_match_shows_empty_state(self, client, make_skill):
        await make_skill("Python")

        resp = await client.get("/search", params={"q": "Basket Weaving"})

        assert resp.status_code == 200
        assert 'No students found with the skill "Basket Weaving"' in resp.text
        assert "Found " not in resp.text
        assert "profile-card" not in resp.text

    async def test_plural_count_and_contact_links(self, client, make_user, make_skill, make_profile):
        python = await make_skill("Python")
        alice = await make_user()
        bob = await make_user(email="bob@example.com", display_name="Bob Designer")
        await make_profile(alice, skills=[python])
        await make_profile(bob, skills=[python], linkedin_url="https://linkedin.com/in/bob")

        resp = await client.get("/search", params={"q": "pyth"})

        assert 'Found 2 students with "pyth"' in resp.text
        assert 'href="mailto:bob@example.com"' in resp.text
        assert 'href="https://linkedin.com/in/bob"' in resp.text

    async def test_blank_query_shows_only_search_box(self, client):
        resp = await client.get("/search")

        assert resp.status_code == 200
        assert "Find Students by Skill" in resp.text
        assert "No students found" not in resp.text
        assert "Found " not in resp.text

    async def test_signed_in_navbar(self, client, make_user):
        alice = await make_user()
        login(client, alice)

        resp = await client.get("/search")

        assert "My Profile" in resp.text
        assert "Logout" in resp.text
