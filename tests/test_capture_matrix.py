"""Unit tests for matrix expansion, identity resolution and the compatibility filter."""

import pytest

from browser_profiles import ProfileRegistry
from capture_config import CaptureConfig
from capture_matrix import (
    build_matrix,
    filter_compatible,
    is_compatible,
    plan_captures,
    resolve_identities,
    safe_filename,
)


def names(pairs):
    return [(engine.name, device.name) for engine, device in pairs]


class TestBuildMatrix:
    def test_engine_major_device_minor_order(self, registry):
        pairs = build_matrix(registry, ["firefox", "chromium"], ["Pixel 7", "Desktop Chrome"])

        assert names(pairs) == [
            ("firefox", "Pixel 7"),
            ("firefox", "Desktop Chrome"),
            ("chromium", "Pixel 7"),
            ("chromium", "Desktop Chrome"),
        ]

    def test_unknown_names_warned_and_dropped(self, registry, capsys):
        notes = []
        pairs = build_matrix(registry, ["chromium", "opera"], ["Nokia 3310", "Pixel 7"], notes)

        assert names(pairs) == [("chromium", "Pixel 7")]
        assert notes == ["Unknown browser: opera, skipping", "Unknown device: Nokia 3310, skipping"]
        assert "Unknown device: Nokia 3310" in capsys.readouterr().out

    def test_repeated_names_produce_each_pair_once(self, registry):
        notes = []
        pairs = build_matrix(
            registry,
            ["chromium", "webkit", "chromium", "opera", "opera"],
            ["Desktop Chrome", "Desktop Chrome", "iPhone 13"],
            notes,
        )

        assert names(pairs) == [
            ("chromium", "Desktop Chrome"),
            ("chromium", "iPhone 13"),
            ("webkit", "Desktop Chrome"),
            ("webkit", "iPhone 13"),
        ]
        assert notes == ["Unknown browser: opera, skipping"]


class TestCompatibility:
    @pytest.mark.parametrize(
        "engine, platform, expected",
        [
            ("webkit", "android", False),
            ("webkit", "ios", True),
            ("firefox", "ios", False),
            ("firefox", "android", False),
            ("chromium", "ios", True),
            ("chromium", "android", True),
            ("firefox", "desktop", True),
            ("webkit", "desktop", True),
        ],
    )
    def test_rules(self, engine, platform, expected):
        assert is_compatible(engine, platform) is expected

    def test_decision_is_stable(self):
        decisions = {is_compatible("webkit", "android") for _ in range(5)}
        assert decisions == {False}

    def test_standard_set_is_product_minus_rejections(self, registry):
        engines = ["chromium", "webkit", "firefox"]
        devices = ["iPhone 13", "Pixel 7", "Desktop Chrome"]

        kept, rejected = filter_compatible(build_matrix(registry, engines, devices))

        assert names(kept) == [
            ("chromium", "iPhone 13"),
            ("chromium", "Pixel 7"),
            ("chromium", "Desktop Chrome"),
            ("webkit", "iPhone 13"),
            ("webkit", "Desktop Chrome"),
            ("firefox", "Desktop Chrome"),
        ]
        assert names(rejected) == [
            ("webkit", "Pixel 7"),
            ("firefox", "iPhone 13"),
            ("firefox", "Pixel 7"),
        ]
        assert len(kept) + len(rejected) == len(engines) * len(devices)


class TestResolveIdentities:
    def test_partial_key_matches_every_variant(self, registry):
        keys = [i.key for i in resolve_identities(registry, ["face"])]
        assert keys == ["facebook_ios", "facebook_android"]

    def test_exact_key_matches_once(self, registry):
        keys = [i.key for i in resolve_identities(registry, ["wechat"])]
        assert keys == ["wechat"]

    def test_exact_match_wins_over_substring(self):
        from browser_profiles import IdentityProfile

        registry = ProfileRegistry([], [], [
            IdentityProfile("line", "LINE", "ua", "webkit", "iPhone 13"),
            IdentityProfile("line_lite", "LINE Lite", "ua", "chromium", "Pixel 7"),
        ])

        assert [i.key for i in resolve_identities(registry, ["line"])] == ["line"]
        assert [i.key for i in resolve_identities(registry, ["lin"])] == ["line", "line_lite"]

    def test_case_insensitive(self, registry):
        keys = [i.key for i in resolve_identities(registry, ["TikTok"])]
        assert keys == ["tiktok_ios", "tiktok_android"]

    def test_substring_match(self, registry):
        keys = [i.key for i in resolve_identities(registry, ["android"])]
        assert keys == ["facebook_android", "instagram_android", "tiktok_android"]

    def test_unknown_key_reported_not_raised(self, registry):
        notes = []
        assert resolve_identities(registry, ["myspace"], notes) == []
        assert notes == ["Unknown in-app browser: myspace, skipping"]

    def test_duplicates_resolved_once(self, registry):
        keys = [i.key for i in resolve_identities(registry, ["facebook", "facebook_ios", "wechat"])]
        assert keys == ["facebook_ios", "facebook_android", "wechat"]


class TestPlanCaptures:
    def config(self, **overrides):
        values = {"url": "https://example.com", "browsers": [], "devices": []}
        values.update(overrides)
        return CaptureConfig(**values)

    def test_webkit_on_android_is_empty(self, registry):
        plan = plan_captures(registry, self.config(browsers=["webkit"], devices=["Pixel 7"]))

        assert plan.requests == []
        assert names(plan.rejected) == [("webkit", "Pixel 7")]

    def test_standard_request_fields(self, registry):
        plan = plan_captures(
            registry,
            self.config(browsers=["chromium"], devices=["Desktop Chrome"], delay=500, full_page=False),
        )

        [request] = plan.standard
        assert request.kind == "standard"
        assert request.platform == "desktop"
        assert request.label == "Chromium (Chrome) - Desktop Chrome"
        assert request.filename == "chromium_Desktop_Chrome.png"
        assert request.user_agent == "Chrome UA"
        assert request.delay_ms == 500
        assert request.full_page is False

    def test_identity_requests_bypass_filter(self, registry):
        # facebook_ios pins webkit + iPhone 15 Pro; no standard matrix requested
        plan = plan_captures(registry, self.config(ua_spoof=["facebook"]))

        assert plan.standard == []
        assert [(r.engine.name, r.device.name, r.platform) for r in plan.in_app] == [
            ("webkit", "iPhone 15 Pro", "ios"),
            ("chromium", "Pixel 7", "android"),
        ]
        assert plan.in_app[0].filename == "inapp_facebook_ios.png"
        assert plan.in_app[0].kind == "in-app"
        assert plan.in_app[0].context_options()["user_agent"].startswith("Mozilla/5.0 (iPhone")

    def test_console_injection_limited_to_standard_requests(self, registry):
        plan = plan_captures(
            registry,
            self.config(browsers=["chromium"], devices=["Pixel 7"], ua_spoof=["wechat"], inject_eruda=True),
        )

        assert [r.inject_script for r in plan.standard] == [True]
        assert [r.inject_script for r in plan.in_app] == [False]

    def test_identity_with_unregistered_device_skipped(self, registry):
        from browser_profiles import IdentityProfile

        small = ProfileRegistry(
            [registry.engine("webkit")],
            [],
            [IdentityProfile("wechat", "WeChat In-App", "ua", "webkit", "iPhone 15 Pro")],
        )
        notes = []

        plan = plan_captures(small, self.config(ua_spoof=["wechat"]), notes)

        assert plan.in_app == []
        assert notes == ["In-app browser wechat needs unknown profile iPhone 15 Pro, skipping"]

    def test_custom_viewport_applies_to_standard_only(self, registry):
        plan = plan_captures(
            registry,
            self.config(browsers=["chromium"], devices=["Pixel 7"], ua_spoof=["wechat"], custom_width=500),
        )

        assert plan.standard[0].effective_viewport == {"width": 500, "height": 839}
        assert plan.standard[0].context_options()["viewport"] == {"width": 500, "height": 839}
        assert plan.in_app[0].effective_viewport == {"width": 393, "height": 659}

    def test_custom_height_used_when_given(self, registry):
        plan = plan_captures(
            registry,
            self.config(browsers=["chromium"], devices=["Pixel 7"], custom_width=500, custom_height=900),
        )

        assert plan.standard[0].effective_viewport == {"width": 500, "height": 900}

    def test_filenames_are_deterministic(self, registry):
        config = self.config(browsers=["chromium", "webkit"], devices=["iPhone 13", "Desktop Chrome"])

        first = [r.filename for r in plan_captures(registry, config).requests]
        second = [r.filename for r in plan_captures(registry, config).requests]

        assert first == second
        assert first[0] == "chromium_iPhone_13.png"


def test_safe_filename_replaces_non_alphanumerics():
    assert safe_filename("iPhone SE (3rd generation)") == "iPhone_SE__3rd_generation_"
    assert safe_filename("Galaxy S9+") == "Galaxy_S9_"
