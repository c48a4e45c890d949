"""
API integration tests for the palette endpoints.

Tests the HTTP surface end to end:
- extraction with upload validation, pre-scaling and palette views
- pixel inspection and hand-picked color description
- JSON/PNG export and mood analysis wiring
"""

import base64
import io

import numpy as np
import pytest
from PIL import Image

from chromalens.services.colors.extract_api import sampled_pixel_estimate
from chromalens.services.mood import MoodAnalysis


def upload(content: bytes, filename: str = "image.png", content_type: str = "image/png"):
    return {"file": (filename, content, content_type)}


class TestExtractEndpoint:
    """Test the /colors/extract endpoint"""

    def test_extract_every_pixel(self, test_client, two_color_png):
        response = test_client.post("/colors/extract?sample_rate=1", files=upload(two_color_png))

        assert response.status_code == 200
        data = response.json()
        assert (data["width"], data["height"]) == (60, 40)
        assert (data["source_width"], data["source_height"]) == (60, 40)
        assert data["request_id"].startswith("pal-")
        assert data["sampled_pixels"] == 2400

        assert [(c["hex"], c["population"]) for c in data["all"]] == [
            ("#fc0000", 1600), ("#0000fc", 800)
        ]
        assert [c["hex"] for c in data["warm"]] == ["#fc0000"]
        assert [c["hex"] for c in data["cool"]] == ["#0000fc"]
        assert data["neutral"] == []
        assert len(data["accents"]) == 2

        red = data["all"][0]
        assert red["rgb"] == {"r": 252, "g": 0, "b": 0}
        assert red["hsl"]["h"] == 0
        assert red["category"] == "Warm"
        assert red["is_accent"] is True
        assert data["swatch_png_b64"] is None

    def test_default_stride(self, test_client, two_color_png):
        # 2400 pixels, stride 10 over 60-pixel rows hits columns 0,10,...,50
        response = test_client.post("/colors/extract", files=upload(two_color_png))

        assert response.status_code == 200
        data = response.json()
        assert data["sampled_pixels"] == 240
        assert [c["population"] for c in data["all"]] == [160, 80]
        assert data["debug"] == {
            "sample_rate": 10,
            "max_colors": 8,
            "max_edge": 150,
            "quantize_step": 12,
            "min_distance_sq": 2500,
        }

    def test_max_colors(self, test_client, two_color_png):
        response = test_client.post("/colors/extract?max_colors=1", files=upload(two_color_png))
        assert [c["hex"] for c in response.json()["all"]] == ["#fc0000"]

    def test_prescale(self, test_client, png_factory):
        img = np.zeros((200, 300, 4), dtype=np.uint8)
        img[...] = (37, 100, 200, 255)

        response = test_client.post("/colors/extract?max_edge=150&sample_rate=1",
                                    files=upload(png_factory(img)))

        data = response.json()
        assert (data["width"], data["height"]) == (150, 100)
        assert (data["source_width"], data["source_height"]) == (300, 200)
        assert data["sampled_pixels"] == 15000
        assert [(c["hex"], c["population"]) for c in data["all"]] == [("#2460c0", 15000)]

    def test_include_swatch(self, test_client, two_color_png):
        response = test_client.post("/colors/extract?include_swatch=true", files=upload(two_color_png))

        swatch = response.json()["swatch_png_b64"]
        img = Image.open(io.BytesIO(base64.b64decode(swatch)))
        assert img.size == (80, 40)

    def test_transparent_image_gives_empty_palette(self, test_client, transparent_png):
        response = test_client.post("/colors/extract", files=upload(transparent_png))

        assert response.status_code == 200
        data = response.json()
        for view in ("all", "warm", "cool", "neutral", "accents"):
            assert data[view] == []

    def test_unsupported_media_type(self, test_client, two_color_png):
        response = test_client.post("/colors/extract",
                                    files=upload(two_color_png, "notes.txt", "text/plain"))
        assert response.status_code == 415

    def test_corrupt_image(self, test_client):
        response = test_client.post("/colors/extract", files=upload(b"this is not a png at all"))
        assert response.status_code == 400

    @pytest.mark.parametrize("query", ["sample_rate=0", "max_colors=0", "max_colors=33", "max_edge=4"])
    def test_parameter_validation(self, test_client, two_color_png, query):
        response = test_client.post(f"/colors/extract?{query}", files=upload(two_color_png))
        assert response.status_code == 422

    def test_metrics_recorded(self, test_client, two_color_png):
        test_client.post("/colors/extract", files=upload(two_color_png))
        test_client.post("/colors/extract", files=upload(b"garbage garbage garbage"))

        summary = test_client.get("/metrics").json()
        assert summary["counters"]["extract_requests_total"] == 2
        assert summary["counters"]["extract_failed_total"] == 1
        assert summary["counters"]["extract_failed_total_httpexception"] == 1
        assert summary["palette_size_stats"]["count"] == 1
        assert "extract_duration_ms" in summary["timing_stats"]


    @pytest.mark.parametrize("pixel_count, sample_rate, expected", [
        (2400, 1, 2400), (2400, 7, 343), (5, 1000, 1),
    ])
    def test_sampled_pixel_estimate(self, pixel_count, sample_rate, expected):
        assert sampled_pixel_estimate(pixel_count, sample_rate) == expected


class TestInspectEndpoint:
    """Test the /colors/inspect endpoint"""

    def test_natural_coordinates(self, test_client, two_color_png):
        response = test_client.post("/colors/inspect?x=5&y=5", files=upload(two_color_png))

        assert response.status_code == 200
        data = response.json()
        assert data["hex"] == "#ff0000"
        assert data["population"] == 0
        assert data["category"] == "Warm"

    def test_display_coordinates(self, test_client, two_color_png):
        # Displayed at half size: (25, 10) maps to (50, 20)
        response = test_client.post(
            "/colors/inspect?x=25&y=10&display_width=30&display_height=20",
            files=upload(two_color_png)
        )
        assert response.json()["hex"] == "#0000ff"

    def test_outside_image(self, test_client, two_color_png):
        response = test_client.post("/colors/inspect?x=60&y=0", files=upload(two_color_png))
        assert response.status_code == 404

    def test_display_size_requires_both(self, test_client, two_color_png):
        response = test_client.post("/colors/inspect?x=1&y=1&display_width=30",
                                    files=upload(two_color_png))
        assert response.status_code == 400


class TestDescribeEndpoint:

    def test_describe_hex(self, test_client):
        response = test_client.get("/colors/describe", params={"hex": "#FF8800"})

        assert response.status_code == 200
        data = response.json()
        assert data["hex"] == "#ff8800"
        assert data["hsl"]["h"] == 32
        assert data["category"] == "Warm"
        assert data["is_accent"] is True
        assert data["population"] == 0

    def test_malformed_hex(self, test_client):
        response = test_client.get("/colors/describe", params={"hex": "not-a-color"})
        assert response.status_code == 400


class TestExportEndpoints:

    def test_export_json(self, test_client):
        response = test_client.post("/colors/export/json", json={
            "dominant": ["#ff0000", "0000FF"],
            "custom": ["#808080", "#808080"],
        })

        assert response.status_code == 200
        assert "chromalens-palette-" in response.headers["content-disposition"]
        doc = response.json()
        assert doc["appName"] == "ChromaLens"
        assert doc["dominantColors"] == [
            {"hex": "#ff0000", "category": "Warm"},
            {"hex": "#0000ff", "category": "Cool"},
        ]
        assert doc["customColors"] == [{"hex": "#808080", "category": "Neutral"}]

    def test_export_json_rejects_bad_hex(self, test_client):
        response = test_client.post("/colors/export/json", json={"dominant": ["#zzzzzz"]})
        assert response.status_code == 400

    def test_export_requires_colors(self, test_client):
        response = test_client.post("/colors/export/json", json={"dominant": []})
        assert response.status_code == 422

    def test_export_png(self, test_client):
        response = test_client.post("/colors/export/png", json={"dominant": ["#ff0000", "#0000ff"]})

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.headers["content-disposition"].endswith('.png"')
        assert Image.open(io.BytesIO(response.content)).size == (800, 450)


class TestMoodEndpoint:

    def test_sends_top_five(self, test_client, monkeypatch):
        seen = {}

        def fake_analyze(colors):
            seen["colors"] = colors
            return MoodAnalysis("Sunset Drive", "Warm and nostalgic.", ["Tip"])

        monkeypatch.setattr("chromalens.main.analyze_palette_mood", fake_analyze)
        colors = ["#ff0000", "#ff8800", "#ffff00", "#00ff00", "#0000ff", "#ff00ff"]

        response = test_client.post("/colors/mood", json={"colors": colors})

        assert response.status_code == 200
        assert seen["colors"] == colors[:5]
        assert response.json()["analysis"] == {
            "palette_name": "Sunset Drive",
            "mood_description": "Warm and nostalgic.",
            "design_tips": ["Tip"],
        }

    def test_unavailable_analysis_is_null(self, test_client, monkeypatch):
        monkeypatch.setattr("chromalens.main.analyze_palette_mood", lambda colors: None)
        response = test_client.post("/colors/mood", json={"colors": ["#ff0000"]})
        assert response.status_code == 200
        assert response.json() == {"analysis": None}


class TestErrorDocumentation:

    @pytest.mark.parametrize("path, method, status", [
        ("/colors/extract", "post", "400"),
        ("/colors/extract", "post", "415"),
        ("/colors/inspect", "post", "404"),
        ("/colors/describe", "get", "400"),
        ("/colors/export/json", "post", "400"),
        ("/colors/mood", "post", "400"),
    ])
    def test_error_responses_use_error_schema(self, test_client, path, method, status):
        schema = test_client.get("/openapi.json").json()
        response = schema["paths"][path][method]["responses"][status]
        assert response["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/ErrorResponse"
        }

    def test_bad_hex_body_matches_error_schema(self, test_client):
        response = test_client.get("/colors/describe", params={"hex": "#12"})
        assert response.status_code == 400
        assert set(response.json()) == {"detail"}
