"""HTTP-level tests for the auth endpoints."""

import pytest

SIGNUP_BODY = {
    "name": "A",
    "username": "alice1",
    "password": "p@ssw0rd",
    "email": "a@x.com",
    "dob": "2000-01-01",
}


def sent_code(mailer) -> str:
    return mailer.send_otp.call_args.args[2]


async def signup(client, **overrides):
    return await client.post("/signup", json={**SIGNUP_BODY, **overrides})


async def signup_and_verify(client, mailer):
    await signup(client)
    response = await client.post("/verifyOtp", json={"otp": sent_code(mailer)})
    assert response.status_code == 200
    return response


class TestSignupEndpoint:

    @pytest.mark.asyncio
    async def test_signup_sets_cookie_and_reports_mail(self, client, mailer):
        response = await signup(client)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Signup successful."
        assert body["user"] == {"name": "A", "username": "alice1", "email": "a@x.com"}
        assert body["otpExpiryInMin"] == 5
        assert body["isMailSent"] is True
        assert "otpExpiryTime" in body
        assert "password" not in str(body)

        assert "authToken" in response.cookies
        assert "httponly" in response.headers["set-cookie"].lower()
        assert len(sent_code(mailer)) == 6

    @pytest.mark.asyncio
    async def test_missing_fields(self, client):
        response = await client.post("/signup", json={"username": "alice1"})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_malformed_dob(self, client):
        response = await signup(client, dob="not-a-date")
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_invalid_email(self, client):
        response = await signup(client, email="nope")
        assert response.status_code == 400
        assert response.json()["field"] == "email"

    @pytest.mark.asyncio
    async def test_duplicate_username(self, client):
        await signup(client)
        response = await signup(client, email="other@x.com")

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_KEY"
        assert response.json()["field"] == "username"


class TestOtpEndpoints:

    @pytest.mark.asyncio
    async def test_profile_closed_until_verified(self, client, mailer):
        await signup(client)

        response = await client.get("/profile")
        assert response.status_code == 401
        assert response.json()["code"] == "OTP_UNVERIFIED"

        response = await client.post("/verifyOtp", json={"otp": sent_code(mailer)})
        assert response.status_code == 200
        assert response.json()["message"] == "Hello alice1, welcome to your profile!"

        response = await client.get("/profile")
        assert response.status_code == 200
        profile = response.json()
        assert profile["username"] == "alice1"
        assert profile["otpVerified"] is True
        assert profile["isAdmin"] is False
        assert "password" not in profile

    @pytest.mark.asyncio
    async def test_wrong_code_returns_remain_chance(self, client, mailer):
        await signup(client)
        code = sent_code(mailer)
        bad = "000000" if code != "000000" else "111111"

        response = await client.post("/verifyOtp", json={"otp": bad})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_OTP"
        assert response.json()["remainChance"] == 4

    @pytest.mark.asyncio
    async def test_exhausted_after_five_failures(self, client, mailer):
        await signup(client)
        code = sent_code(mailer)
        bad = "000000" if code != "000000" else "111111"
        for _ in range(5):
            await client.post("/verifyOtp", json={"otp": bad})

        response = await client.post("/verifyOtp", json={"otp": code})

        assert response.status_code == 400
        assert response.json()["code"] == "OTP_ATTEMPTS_EXHAUSTED"

    @pytest.mark.asyncio
    async def test_numeric_code_is_accepted(self, client, mailer):
        await signup(client)
        code = sent_code(mailer)

        response = await client.post("/verifyOtp", json={"otp": int(code)})

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_expiry_times_carry_utc_offset(self, client, mailer):
        response = await signup(client)
        assert response.json()["otpExpiryTime"].endswith(("Z", "+00:00"))

        response = await client.post("/regenerateOtp")
        assert response.json()["otpExpiryTime"].endswith(("Z", "+00:00"))

        await client.post("/verifyOtp", json={"otp": sent_code(mailer)})
        profile = (await client.get("/profile")).json()
        assert profile["createdAt"].endswith(("Z", "+00:00"))

    @pytest.mark.asyncio
    async def test_verify_without_cookie(self, client):
        response = await client.post("/verifyOtp", json={"otp": "123456"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_regenerate(self, client, mailer):
        await signup(client)

        response = await client.post("/regenerateOtp")

        assert response.status_code == 200
        assert response.json()["isMailSent"] is True
        assert mailer.send_otp.await_count == 2

        response = await client.post("/verifyOtp", json={"otp": sent_code(mailer)})
        assert response.status_code == 200

        response = await client.post("/regenerateOtp")
        assert response.status_code == 409
        assert response.json()["code"] == "OTP_ALREADY_VERIFIED"


class TestLoginLogout:

    @pytest.mark.asyncio
    async def test_login_requires_verified_otp(self, client):
        await signup(client)
        client.cookies.clear()

        response = await client.post("/login", json={"username": "alice1", "password": "p@ssw0rd"})

        assert response.status_code == 401
        assert response.json()["code"] == "OTP_UNVERIFIED"

    @pytest.mark.asyncio
    async def test_login_and_logout(self, client, mailer):
        await signup_and_verify(client, mailer)
        client.cookies.clear()

        response = await client.post("/login", json={"username": "alice1", "password": "wrong-pass"})
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

        response = await client.post("/login", json={"username": "alice1", "password": "p@ssw0rd"})
        assert response.status_code == 200
        assert response.json()["message"] == "Login successful"
        assert response.cookies["authToken"] == response.json()["token"]

        assert (await client.get("/profile")).status_code == 200

        response = await client.post("/logout")
        assert response.status_code == 200

        response = await client.get("/profile", cookies={"authToken": "revoked-or-unknown"})
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_logged_out_token_is_dead(self, client, mailer):
        await signup_and_verify(client, mailer)
        token = client.cookies["authToken"]

        await client.post("/logout")
        client.cookies.clear()

        response = await client.get("/profile", cookies={"authToken": token})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_all(self, client, mailer):
        await signup_and_verify(client, mailer)
        first = client.cookies["authToken"]
        client.cookies.clear()
        await client.post("/login", json={"username": "alice1", "password": "p@ssw0rd"})

        response = await client.post("/logoutAll")
        assert response.status_code == 200
        client.cookies.clear()

        response = await client.get("/profile", cookies={"authToken": first})
        assert response.status_code == 401


class TestProfileEndpoints:

    @pytest.mark.asyncio
    async def test_public_profile(self, client, mailer):
        await signup_and_verify(client, mailer)
        own = (await client.get("/profile")).json()
        client.cookies.clear()

        response = await client.get(f"/profile/{own['id']}")

        assert response.status_code == 200
        assert response.json() == {"id": own["id"], "username": "alice1", "name": "A", "avatar": None}

    @pytest.mark.asyncio
    async def test_public_profile_not_found(self, client):
        response = await client.get("/profile/does-not-exist")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_user(self, client, mailer):
        await signup_and_verify(client, mailer)

        response = await client.put(
            "/updateUser",
            json={"oldPassword": "p@ssw0rd", "name": "Alice", "newPassword": "n3w-passw0rd"},
        )
        assert response.status_code == 200
        assert response.json()["message"] == "User updated successfully"
        assert (await client.get("/profile")).json()["name"] == "Alice"

        client.cookies.clear()
        response = await client.post("/login", json={"username": "alice1", "password": "n3w-passw0rd"})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_update_user_wrong_old_password(self, client, mailer):
        await signup_and_verify(client, mailer)
        response = await client.put("/updateUser", json={"oldPassword": "nope-nope", "name": "Z"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_update_requires_auth(self, client):
        response = await client.put("/updateUser", json={"oldPassword": "x", "name": "Z"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_upload_avatar(self, client, mailer, storage):
        await signup_and_verify(client, mailer)

        response = await client.post(
            "/uploadAvatar",
            files={"media": ("me.png", b"\x89PNG fake", "image/png")},
        )

        assert response.status_code == 200
        avatar = (await client.get("/profile")).json()["avatar"]
        assert avatar["path"].startswith("/profiles/")
        assert (storage.base_dir / avatar["path"].lstrip("/")).exists()

    @pytest.mark.asyncio
    async def test_upload_rejects_non_image(self, client, mailer):
        await signup_and_verify(client, mailer)
        response = await client.post(
            "/uploadAvatar",
            files={"media": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
