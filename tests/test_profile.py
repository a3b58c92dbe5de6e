"""Tests for viewing and editing profiles."""

from sqlalchemy import select

from app.models.profile import Profile
from tests.conftest import login


class TestProfileView:

    async def test_requires_sign_in(self, client):
        resp = await client.get("/profile")

        assert resp.status_code == 303
        assert resp.headers["location"] == "/auth/login"

    async def test_owner_without_profile_goes_to_setup(self, client, make_user):
        alice = await make_user()
        login(client, alice)

        for url in ("/profile", f"/profile/{alice.id}"):
            resp = await client.get(url)
            assert resp.status_code == 303
            assert resp.headers["location"] == "/profile/setup"

    async def test_missing_profile_of_someone_else(self, client, make_user):
        alice = await make_user()
        bob = await make_user(email="bob@example.com", display_name="Bob")
        login(client, alice)

        resp = await client.get(f"/profile/{bob.id}")

        assert resp.status_code == 303
        assert resp.headers["location"] == "/?error=Profile+not+found"
        home = await client.get(resp.headers["location"])
        assert "Profile not found" in home.text

    async def test_unknown_identity_is_not_found_too(self, client, make_user):
        alice = await make_user()
        login(client, alice)

        resp = await client.get("/profile/9999")

        assert resp.headers["location"] == "/?error=Profile+not+found"

    async def test_own_profile(self, client, make_user, make_skill, make_profile):
        python = await make_skill("Python")
        alice = await make_user()
        await make_profile(alice, skills=[python], bio="Backend nerd", phone="+1 555 0100")
        login(client, alice)

        resp = await client.get("/profile", params={"success": "Profile created!"})

        assert resp.status_code == 200
        assert "Alice Builder" in resp.text
        assert ">AB<" in resp.text
        assert "3rd Year" in resp.text
        assert "Backend nerd" in resp.text
        assert 'href="tel:+1 555 0100"' in resp.text
        assert ">Python</span>" in resp.text
        assert "Edit Profile" in resp.text
        assert "Send Email" not in resp.text
        assert "Profile created!" in resp.text

    async def test_someone_elses_profile(self, client, make_user, make_skill, make_profile):
        figma = await make_skill("Figma", category="Design")
        alice = await make_user()
        bob = await make_user(email="bob@example.com", display_name="Bob Designer")
        await make_profile(bob, skills=[figma], linkedin_url="https://linkedin.com/in/bob")
        login(client, alice)

        resp = await client.get(f"/profile/{bob.id}")

        assert resp.status_code == 200
        assert "Bob Designer" in resp.text
        assert "Edit Profile" not in resp.text
        assert "Send Email" in resp.text
        assert "View LinkedIn" in resp.text


class TestProfileEdit:

    async def test_edit_form_is_prefilled(self, client, make_user, make_profile):
        alice = await make_user()
        await make_profile(alice, department="Physics")
        login(client, alice)

        resp = await client.get("/profile/edit")

        assert resp.status_code == 200
        assert 'value="Physics"' in resp.text
        assert '<option value="3rd Year" selected>' in resp.text

    async def test_edit_without_profile_goes_to_setup(self, client, make_user):
        alice = await make_user()
        login(client, alice)

        resp = await client.get("/profile/edit")

        assert resp.headers["location"] == "/profile/setup"

    async def test_update(self, client, make_user, make_profile, fetch):
        alice = await make_user()
        await make_profile(alice)
        login(client, alice)

        resp = await client.post("/profile/edit", data={
            "full_name": "Alice B. Builder",
            "department": "Mathematics",
            "year_of_study": "Masters",
            "email": "alice@example.com",
            "bio": "",
        })

        assert resp.status_code == 303
        assert resp.headers["location"] == "/profile?success=Profile+updated"
        stored = (await fetch(select(Profile).where(Profile.id == alice.id)))[0]
        assert stored.full_name == "Alice B. Builder"
        assert stored.department == "Mathematics"
        assert stored.year_of_study.value == "Masters"
        assert stored.bio is None

    async def test_invalid_update_rerenders_with_errors(self, client, make_user, make_profile, fetch):
        alice = await make_user()
        await make_profile(alice)
        login(client, alice)

        resp = await client.post("/profile/edit", data={
            "full_name": "Alice",
            "department": "Mathematics",
            "year_of_study": "5th Year",
            "email": "alice@example.com",
            "linkedin_url": "linkedin.com/in/alice",
        })

        assert resp.status_code == 200
        assert "Year of study:" in resp.text
        assert "LinkedIn URL:" in resp.text
        stored = (await fetch(select(Profile).where(Profile.id == alice.id)))[0]
        assert stored.department == "Computer Science"
