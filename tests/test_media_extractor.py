"""
Unit tests for media reference extraction.

Tests discovery of storage URLs in schema-free content trees and the
URL helper functions.
"""

import pytest

from site_backup.media.extractor import (
    MEDIA_FIELD_NAMES,
    extract_media_references,
    filename_from_url,
    group_urls_by_folder,
    is_storage_url,
    storage_path_from_url,
)

from conftest import HERO_URL, LOGO_URL, TEAM_URL, storage_url


class TestIsStorageUrl:
    """Test storage URL detection."""
    
    def test_public_object_url(self):
        assert is_storage_url(HERO_URL) is True
    
    def test_storage_domain_without_public_prefix(self):
        assert is_storage_url("https://abc.supabase.co/storage/v1/object/sign/x.jpg") is True
    
    def test_self_hosted_public_prefix(self):
        assert is_storage_url("http://localhost:54321/storage/v1/object/public/media/a.png") is True
    
    @pytest.mark.parametrize("value", [
        None,
        "",
        42,
        {"url": HERO_URL},
        "https://images.example.com/photo.jpg",
        "/images/local.png",
    ])
    def test_non_storage_values(self, value):
        assert is_storage_url(value) is False
    
    def test_custom_markers(self):
        url = "https://cdn.example.com/media/a.jpg"
        assert is_storage_url(url) is False
        assert is_storage_url(url, markers=["cdn.example.com/media/"]) is True


class TestExtractMediaReferences:
    """Test the recursive content tree walk."""
    
    def test_sample_content(self, sample_content):
        urls = extract_media_references(sample_content)
        
        assert urls == [HERO_URL, TEAM_URL, LOGO_URL]
    
    def test_duplicates_collapse(self):
        content = {
            "pages": [
                {"blocks": [{"image": HERO_URL}, {"cover": HERO_URL}]},
                {"blocks": [{"nested": {"deeper": [{"src": HERO_URL}]}}]},
            ]
        }
        
        assert extract_media_references(content) == [HERO_URL]
    
    def test_three_pages_two_blocks_one_repeated_image(self):
        content = {
            "pages": [
                {"blocks": [{"image": HERO_URL}, {"text": "a"}]},
                {"blocks": [{"text": "b"}, {"image": HERO_URL}]},
                {"blocks": [{"text": "c"}, {"text": "d"}]},
            ]
        }
        
        assert len(extract_media_references(content)) == 1
    
    def test_non_allow_listed_field_is_ignored(self):
        content = {"downloadLink": HERO_URL, "href": TEAM_URL}
        
        assert extract_media_references(content) == []
    
    def test_unknown_container_fields_are_traversed(self):
        content = {"whatever": {"list": [{"unusual": [{"thumbnail": TEAM_URL}]}]}}
        
        assert extract_media_references(content) == [TEAM_URL]
    
    def test_allow_listed_field_with_composite_value_is_traversed(self):
        content = {"image": {"url": LOGO_URL, "alt": "Logo"}}
        
        assert extract_media_references(content) == [LOGO_URL]
    
    def test_top_level_sequence(self):
        content = [{"url": HERO_URL}, [{"icon": LOGO_URL}], "loose string", None]
        
        assert extract_media_references(content) == [HERO_URL, LOGO_URL]
    
    def test_non_storage_and_non_string_values_are_skipped(self):
        content = {
            "image": "https://unsplash.example.com/photo.jpg",
            "logo": None,
            "icon": 12,
            "src": True,
            "url": "",
        }
        
        assert extract_media_references(content) == []
    
    @pytest.mark.parametrize("content", [None, "text", 3, 1.5, True, [], {}])
    def test_scalar_and_empty_trees(self, content):
        assert extract_media_references(content) == []
    
    def test_every_allow_listed_name_is_matched(self):
        content = {
            "blocks": [{name: storage_url(f"c/{name}.png")} for name in sorted(MEDIA_FIELD_NAMES)]
        }
        
        assert len(extract_media_references(content)) == len(MEDIA_FIELD_NAMES)
    
    def test_input_is_not_modified(self, sample_content):
        import copy
        before = copy.deepcopy(sample_content)
        
        extract_media_references(sample_content)
        
        assert sample_content == before


class TestUrlHelpers:
    """Test filename and storage path helpers."""
    
    def test_filename_from_url(self):
        assert filename_from_url(HERO_URL) == "banner.jpg"
    
    def test_filename_is_url_decoded(self):
        assert filename_from_url(storage_url("c/my%20photo.jpg")) == "my photo.jpg"
    
    def test_filename_ignores_query(self):
        assert filename_from_url(storage_url("c/a.png?width=200")) == "a.png"
    
    def test_filename_without_path(self):
        assert filename_from_url("https://demo.supabase.co") == "unknown"
        assert filename_from_url("") == "unknown"
    
    def test_filename_never_contains_slash(self):
        assert "/" not in filename_from_url(storage_url("c/a%2Fb.png"))
    
    def test_storage_path_from_url(self):
        assert storage_path_from_url(HERO_URL) == "customer-1/hero/banner.jpg"
    
    def test_storage_path_for_other_urls(self):
        assert storage_path_from_url("https://example.com/a.jpg") is None
    
    def test_group_urls_by_folder(self):
        grouped = group_urls_by_folder([
            HERO_URL,
            TEAM_URL,
            storage_url("root-file.png"),
            "https://example.com/ignored.jpg",
        ])
        
        assert grouped == {
            "customer-1/hero": [HERO_URL],
            "customer-1/team": [TEAM_URL],
            "root": [storage_url("root-file.png")],
        }
