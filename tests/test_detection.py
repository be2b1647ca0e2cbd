"""
Tests for input classification and validation.

Covers:
- URL, text and file classification
- MIME type precedence over file extensions
- Validation errors and warnings per input type
- Platform hints
"""

import pytest

from recipe_intake.recipe_import.detection import (
    MAX_TEXT_LENGTH,
    classify,
    get_platform_hints,
    validate_input,
    validate_text,
)
from recipe_intake.recipe_import.models import BinaryFileRef, InputType


class TestClassifyUrl:
    """URLs are tagged with their platform."""

    @pytest.mark.parametrize(
        "url,platform",
        [
            ("https://www.tiktok.com/@chef/video/1234567890", "tiktok"),
            ("https://www.instagram.com/reel/Cx1abc/", "instagram"),
            ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "youtube"),
            ("https://youtube.com/shorts/abc123", "youtube"),
            ("https://youtu.be/abc123", "youtube"),
        ],
    )
    def test_known_video_platforms(self, url, platform):
        result = classify(url)
        assert result.type == InputType.URL
        assert result.metadata.platform == platform
        assert result.metadata.is_video_url is True
        assert result.metadata.is_social_media is True
        assert result.confidence > 0.9

    def test_tiktok_scenario(self):
        result = classify("https://www.tiktok.com/@chef/video/1234567890")
        assert result.type == InputType.URL
        assert result.metadata.platform == "tiktok"
        assert result.metadata.is_video_url is True
        assert result.confidence > 0.9

    def test_instagram_post_is_not_video(self):
        result = classify("https://www.instagram.com/p/Cx1abc/")
        assert result.metadata.platform == "instagram"
        assert result.metadata.is_video_url is False

    def test_recipe_site(self):
        result = classify("https://www.allrecipes.com/recipe/10813/best-chocolate-chip-cookies/")
        assert result.metadata.platform == "recipe-site"
        assert result.confidence == 0.9
        assert result.metadata.is_social_media is False

    def test_generic_url(self):
        result = classify("https://example.com/my-dinner")
        assert result.type == InputType.URL
        assert result.metadata.platform == "generic"
        assert result.confidence == 0.8

    def test_bare_domain_is_url(self):
        result = classify("example.com/pasta")
        assert result.type == InputType.URL

    def test_sentence_is_not_url(self):
        result = classify("Mix the flour with water")
        assert result.type == InputType.TEXT


class TestClassifyText:
    """Free text is scored by how recipe-like it looks."""

    def test_structured_recipe_scores_high(self, sample_recipe_text):
        result = classify(sample_recipe_text)
        assert result.type == InputType.TEXT
        assert result.confidence > 0.7
        assert result.confidence <= 0.95
        assert result.metadata.has_recipe_structure is True
        assert result.metadata.bullet_points == 5
        assert result.metadata.numbered_steps == 4

    def test_plain_prose_scores_base(self):
        result = classify("Had a lovely walk by the river this afternoon")
        assert result.type == InputType.TEXT
        assert result.confidence == 0.5
        assert result.metadata.has_recipe_structure is False

    def test_empty_input(self):
        result = classify("   ")
        assert result.type == InputType.TEXT
        assert result.confidence == 0.0

    def test_none_input_never_raises(self):
        result = classify(None)
        assert result.type == InputType.TEXT


class TestClassifyFile:
    """Files are classified by MIME type, then extension."""

    def test_image_mime(self):
        result = classify(BinaryFileRef(name="card.jpg", mime_type="image/jpeg", size=2048))
        assert result.type == InputType.IMAGE
        assert result.confidence == 0.95
        assert result.metadata.file_type == "image/jpeg"

    def test_video_mime(self):
        result = classify(BinaryFileRef(name="clip.mp4", mime_type="video/mp4", size=2048))
        assert result.type == InputType.VIDEO
        assert result.confidence == 0.95

    def test_mime_wins_over_extension(self):
        result = classify(BinaryFileRef(name="clip.mp4", mime_type="image/png", size=2048))
        assert result.type == InputType.IMAGE
        assert result.confidence == 0.95

        result = classify(BinaryFileRef(name="photo.jpg", mime_type="video/quicktime", size=2048))
        assert result.type == InputType.VIDEO

    def test_extension_fallback(self):
        result = classify(BinaryFileRef(name="Recipe.JPG", size=2048))
        assert result.type == InputType.IMAGE
        assert result.confidence == 0.8
        assert result.metadata.file_type == "image/jpeg"

        result = classify(BinaryFileRef(name="dinner.mov", mime_type="application/octet-stream", size=2048))
        assert result.type == InputType.VIDEO
        assert result.metadata.file_type == "video/mov"

    def test_unknown_file_defaults_to_image(self):
        result = classify(BinaryFileRef(name="blob", size=2048))
        assert result.type == InputType.IMAGE
        assert result.confidence == 0.3
        assert result.metadata.file_type == "unknown"

    def test_size_from_data(self):
        result = classify(BinaryFileRef(name="card.png", mime_type="image/png", data=b"x" * 5000))
        assert result.metadata.size == 5000


class TestValidateText:
    """Text validation: too short is an error, everything else warns."""

    @pytest.mark.parametrize("text", ["", "eggs", "salt pepr"])
    def test_short_text_rejected(self, text):
        result = validate_text(text, classify(text))
        assert result.is_valid is False
        assert result.errors == ["Text is too short to contain a meaningful recipe"]

    def test_long_text_warns_but_valid(self):
        text = "Ingredients: 2 cups flour. " * (MAX_TEXT_LENGTH // 20)
        assert len(text) > MAX_TEXT_LENGTH
        result = validate_text(text, classify(text))
        assert result.is_valid is True
        assert any("very long" in w for w in result.warnings)

    def test_recipe_text_is_clean(self, sample_recipe_text):
        result = validate_input(sample_recipe_text, classify(sample_recipe_text))
        assert result.is_valid is True
        assert result.warnings == []

    def test_missing_sections_warn(self):
        text = "Something nice for dinner tonight"
        result = validate_input(text, classify(text))
        assert result.is_valid is True
        assert any("No ingredients" in w for w in result.warnings)
        assert any("No cooking steps" in w for w in result.warnings)


class TestValidateOther:
    """URL, image and video validation."""

    def test_http_url_warns(self):
        url = "http://example.com/recipe"
        result = validate_input(url, classify(url))
        assert result.is_valid is True
        assert any("HTTPS" in w for w in result.warnings)

    def test_tiktok_profile_warns(self):
        url = "https://www.tiktok.com/@chef"
        detection = classify(url)
        assert detection.metadata.platform == "tiktok"
        assert detection.metadata.is_video_url is False

        result = validate_input(url, detection)
        assert result.is_valid is True
        assert "This appears to be a TikTok profile link rather than a specific video" in result.warnings

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.tiktok.com/@chef/video/1234567890",
            "https://vm.tiktok.com/ZMabc123/",
            "https://www.tiktok.com/t/ZTRabc123/",
        ],
    )
    def test_tiktok_video_links_do_not_warn(self, url):
        detection = classify(url)
        assert detection.metadata.is_video_url is True
        assert not any("profile" in w for w in validate_input(url, detection).warnings)

    def test_oversized_image_rejected(self):
        file = BinaryFileRef(name="big.png", mime_type="image/png", size=11 * 1024 * 1024)
        result = validate_input(file, classify(file))
        assert result.is_valid is False
        assert "too large" in result.errors[0]

    def test_tiny_image_warns(self):
        file = BinaryFileRef(name="tiny.png", mime_type="image/png", size=200)
        result = validate_input(file, classify(file))
        assert result.is_valid is True
        assert any("very small" in w for w in result.warnings)

    def test_video_always_warns(self):
        file = BinaryFileRef(name="clip.mp4", mime_type="video/mp4", size=5 * 1024 * 1024)
        result = validate_input(file, classify(file))
        assert result.is_valid is True
        assert any("transcription" in w for w in result.warnings)

    def test_oversized_video_rejected(self):
        file = BinaryFileRef(name="clip.mp4", mime_type="video/mp4", size=101 * 1024 * 1024)
        result = validate_input(file, classify(file))
        assert result.is_valid is False


class TestPlatformHints:
    def test_instagram_hints(self):
        hints = get_platform_hints(classify("https://www.instagram.com/reel/abc/"))
        assert any("Reels" in h for h in hints)

    def test_image_hints(self):
        hints = get_platform_hints(classify(BinaryFileRef(name="a.png", mime_type="image/png")))
        assert hints

    def test_confident_text_has_no_hints(self, sample_recipe_text):
        assert get_platform_hints(classify(sample_recipe_text)) == []
