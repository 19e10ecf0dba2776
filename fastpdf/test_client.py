"""
Tests for the PDFClient and AsyncPDFClient facades.

HTTP traffic is intercepted with respx; no request leaves the process.
"""

import io
import json
import tempfile
import zipfile
from pathlib import Path
from unittest import IsolatedAsyncioTestCase, TestCase
from unittest.mock import patch

import httpx
import respx

from fastpdf.client import AsyncPDFClient, PDFClient
from fastpdf.config import SUPPORTED_IMAGE_FORMATS
from fastpdf.errors import (
    PDFApiError,
    PDFAuthError,
    PDFValidationError,
    ServiceNotConfigured,
)
from fastpdf.inputs import Source
from fastpdf.models import ImageFile, RenderOptions, StyleFile, Template

BASE_URL = "https://data.fastpdfservice.com/v1"
API_KEY = "test-api-key"


def make_zip(entries):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries:
            archive.writestr(name, content)
    return buffer.getvalue()


class PDFClientConfigTestCase(TestCase):
    """Test cases for client construction."""

    def test_empty_api_key(self):
        """Test that an empty API key is rejected."""
        for key in ("", "   "):
            with self.subTest(key=key):
                with self.assertRaises(ServiceNotConfigured):
                    PDFClient(key)

    def test_base_url_override(self):
        """Test that base_url and api_version compose the request URL root."""
        with PDFClient(API_KEY, base_url="https://pdf.example.com/", api_version="v2") as client:
            self.assertEqual(client.settings.base_url, "https://pdf.example.com/v2")
            self.assertEqual(client.http.base_url, "https://pdf.example.com/v2")

    def test_from_env(self):
        """Test building a client from environment variables."""
        environ = {"FASTPDF_API_KEY": "env-key", "FASTPDF_TIMEOUT": "5"}

        with PDFClient.from_env(environ) as client:
            self.assertEqual(client.http.default_headers["Authorization"], "env-key")
            self.assertEqual(client.settings.timeout, 5.0)

    def test_from_env_without_key(self):
        """Test that a missing FASTPDF_API_KEY raises ServiceNotConfigured."""
        with self.assertRaises(ServiceNotConfigured):
            PDFClient.from_env({})

    def test_shared_http_client_is_not_closed(self):
        """Test that an injected httpx.Client stays open after close()."""
        shared = httpx.Client()
        self.addCleanup(shared.close)

        PDFClient(API_KEY, http_client=shared).close()

        self.assertFalse(shared.is_closed)


class PDFClientTestCase(TestCase):
    """Test cases for PDFClient operations."""

    def setUp(self):
        """Start respx and build a client."""
        self.router = respx.mock(assert_all_called=False)
        self.router.start()
        self.addCleanup(self.router.stop)

        self.client = PDFClient(API_KEY)
        self.addCleanup(self.client.close)

        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.root = Path(self.tmp.name)

    def test_validate_token(self):
        """Test that validate_token sends the raw key and reads 200 as True."""
        route = self.router.get(f"{BASE_URL}/token").mock(return_value=httpx.Response(200))

        self.assertTrue(self.client.validate_token())
        self.assertEqual(route.calls.last.request.headers["Authorization"], API_KEY)

    def test_per_call_timeout_reaches_httpx(self):
        """Test that an operation timeout overrides the client timeout for that call only."""
        route = self.router.get(f"{BASE_URL}/template/file/t1").mock(
            return_value=httpx.Response(200, content=b"<p/>")
        )

        self.client.get_template_file("t1", timeout=3.0)
        self.assertEqual(route.calls.last.request.extensions["timeout"]["read"], 3.0)

        self.client.get_template_file("t1")
        self.assertEqual(
            route.calls.last.request.extensions["timeout"]["read"], self.client.settings.timeout
        )

    def test_per_call_timeout_on_multipart_operation(self):
        """Test that the timeout keyword does not leak into the request body."""
        route = self.router.post(f"{BASE_URL}/render/pdf").mock(
            return_value=httpx.Response(200, content=b"%PDF")
        )

        self.client.render("<p/>", render_data={"a": 1}, timeout=7.5)

        request = route.calls.last.request
        self.assertEqual(request.extensions["timeout"]["read"], 7.5)
        self.assertNotIn(b"timeout", request.content)

    def test_validate_token_rejected(self):
        """Test that a rejected key raises PDFAuthError."""
        self.router.get(f"{BASE_URL}/token").mock(return_value=httpx.Response(401, text="bad key"))

        with self.assertRaises(PDFAuthError):
            self.client.validate_token()

    def test_render_literal_html(self):
        """Test an ad-hoc render sends a multipart body and returns PDF bytes."""
        route = self.router.post(f"{BASE_URL}/render/pdf").mock(
            return_value=httpx.Response(200, content=b"%PDF-1.7 rendered")
        )

        pdf = self.client.render("<h1>Hello {{name}}</h1>", render_data={"name": "John"})

        self.assertEqual(pdf, b"%PDF-1.7 rendered")
        request = route.calls.last.request
        self.assertTrue(request.headers["Content-Type"].startswith("multipart/form-data"))
        self.assertIn(b'name="file_data"; filename="file.html"', request.content)
        self.assertIn(b"<h1>Hello {{name}}</h1>", request.content)
        self.assertIn(b'name="render_data"', request.content)
        self.assertIn(b'"title_header_enabled": false', request.content)

    def test_not_found_error_keeps_status_and_body(self):
        """Test that a 404 surfaces status and body unmodified."""
        self.router.get(f"{BASE_URL}/template/missing").mock(
            return_value=httpx.Response(404, text="not found")
        )

        with self.assertRaises(PDFApiError) as cm:
            self.client.get_template("missing")

        self.assertEqual(cm.exception.status_code, 404)
        self.assertEqual(cm.exception.response_text, "not found")

    def test_get_template(self):
        """Test decoding a template response."""
        self.router.get(f"{BASE_URL}/template/tpl-1").mock(
            return_value=httpx.Response(200, json={
                "id": "tpl-1",
                "name": "Invoice",
                "format": "html",
                "style_files": [{"id": "s-1", "format": "css"}],
            })
        )

        template = self.client.get_template("tpl-1")

        self.assertIsInstance(template, Template)
        self.assertEqual(template.id, "tpl-1")
        self.assertEqual(template.style_files[0].id, "s-1")

    def test_get_all_templates(self):
        """Test listing templates with a limit."""
        route = self.router.get(f"{BASE_URL}/template").mock(
            return_value=httpx.Response(200, json=[{"id": "a"}, {"id": "b"}])
        )

        templates = self.client.get_all_templates(limit=2)

        self.assertEqual([t.id for t in templates], ["a", "b"])
        self.assertEqual(route.calls.last.request.url.params["limit"], "2")

    def test_add_template(self):
        """Test storing a template and decoding the stored copy."""
        route = self.router.post(f"{BASE_URL}/template").mock(
            return_value=httpx.Response(200, json={"id": "tpl-9", "name": "Invoice", "format": "html"})
        )

        template = self.client.add_template("<p/>", Template(name="Invoice"))

        self.assertEqual(template.id, "tpl-9")
        self.assertIn(b'name="template_data"', route.calls.last.request.content)

    def test_add_stylesheet_and_image(self):
        """Test attaching files to a stored template."""
        self.router.post(f"{BASE_URL}/template/css/tpl-1").mock(
            return_value=httpx.Response(200, json={"id": "s-1", "format": "css", "template_id": "tpl-1"})
        )
        self.router.post(f"{BASE_URL}/template/img/tpl-1").mock(
            return_value=httpx.Response(200, json={"id": "i-1", "uri": "logo"})
        )

        style = self.client.add_stylesheet("tpl-1", "body {}", StyleFile())
        image = self.client.add_image("tpl-1", b"\xff\xd8\xff\xe0" + b"\x00" * 16, ImageFile(format="jpeg", uri="logo"))

        self.assertEqual(style.template_id, "tpl-1")
        self.assertEqual(image.id, "i-1")

    def test_delete_template(self):
        """Test that delete reports True only for 204."""
        self.router.delete(f"{BASE_URL}/template/t1").mock(return_value=httpx.Response(204))
        self.router.delete(f"{BASE_URL}/template/t2").mock(return_value=httpx.Response(200, json={}))

        self.assertTrue(self.client.delete_template("t1"))
        self.assertFalse(self.client.delete_template("t2"))

    def test_delete_stylesheet_and_image(self):
        """Test the stylesheet and image delete endpoints."""
        self.router.delete(f"{BASE_URL}/template/css/s1").mock(return_value=httpx.Response(204))
        self.router.delete(f"{BASE_URL}/template/img/i1").mock(return_value=httpx.Response(204))

        self.assertTrue(self.client.delete_stylesheet("s1"))
        self.assertTrue(self.client.delete_image("i1"))

    def test_download_files(self):
        """Test fetching stored template, stylesheet and image content."""
        self.router.get(f"{BASE_URL}/template/file/t1").mock(return_value=httpx.Response(200, content=b"<p/>"))
        self.router.get(f"{BASE_URL}/template/css/file/s1").mock(return_value=httpx.Response(200, content=b"p{}"))
        self.router.get(f"{BASE_URL}/template/img/file/i1").mock(return_value=httpx.Response(200, content=b"IMG"))

        self.assertEqual(self.client.get_template_file("t1"), b"<p/>")
        self.assertEqual(self.client.get_stylesheet("s1"), b"p{}")
        self.assertEqual(self.client.get_image("i1"), b"IMG")

    def test_render_barcode(self):
        """Test that render_barcode posts a JSON body."""
        route = self.router.post(f"{BASE_URL}/render/barcode").mock(
            return_value=httpx.Response(200, content=b"PNG")
        )

        self.assertEqual(self.client.render_barcode("0123456789", "code39"), b"PNG")

        request = route.calls.last.request
        self.assertEqual(request.headers["Content-Type"], "application/json")
        self.assertEqual(
            json.loads(request.content),
            {"data": {"data": "0123456789", "barcode_format": "code39"}},
        )

    def test_render_image(self):
        """Test that rendered images carry a sniffed content type."""
        route = self.router.post(f"{BASE_URL}/render/img").mock(
            return_value=httpx.Response(200, content=b"%PDF")
        )

        self.client.render_image(b"GIF89a" + b"\x00" * 16, RenderOptions(w=100.0))

        content = route.calls.last.request.content
        self.assertIn(b'name="image"; filename="image"', content)
        self.assertIn(b"Content-Type: image/gif", content)
        self.assertIn(b'"w": 100.0', content)

    def test_render_image_from_id(self):
        """Test rendering a stored image."""
        route = self.router.post(f"{BASE_URL}/img/i1").mock(return_value=httpx.Response(200, content=b"%PDF"))

        self.assertEqual(self.client.render_image_from_id("i1"), b"%PDF")
        self.assertTrue(route.called)

    def test_to_image_every_supported_format(self):
        """Test that every allow-listed image format reaches the transport."""
        with patch.object(self.client.http, "request", return_value=httpx.Response(200, content=b"IMG")) as mock_request:
            for output_format in SUPPORTED_IMAGE_FORMATS:
                with self.subTest(output_format=output_format):
                    self.assertEqual(self.client.to_image(b"%PDF", output_format), b"IMG")

        self.assertEqual(mock_request.call_count, len(SUPPORTED_IMAGE_FORMATS))

    def test_to_image_unsupported_format_sends_nothing(self):
        """Test that an unsupported format fails with zero network calls."""
        with patch.object(self.client.http, "request") as mock_request:
            with self.assertRaises(PDFValidationError):
                self.client.to_image(b"%PDF", "docx")

        mock_request.assert_not_called()

    def test_merge_out_of_range_sends_nothing(self):
        """Test that merge validates the file count before the transport."""
        with patch.object(self.client.http, "request") as mock_request:
            for files in ([], [b"%PDF"], [b"%PDF"] * 101):
                with self.subTest(count=len(files)):
                    with self.assertRaises(PDFValidationError):
                        self.client.merge(files)

        mock_request.assert_not_called()

    def test_merge(self):
        """Test merging PDFs read from disk."""
        first = self.root / "first.pdf"
        second = self.root / "second.pdf"
        first.write_bytes(b"%PDF-first")
        second.write_bytes(b"%PDF-second")
        route = self.router.post(f"{BASE_URL}/pdf/merge").mock(
            return_value=httpx.Response(200, content=b"%PDF-merged")
        )

        self.assertEqual(self.client.merge([first, second]), b"%PDF-merged")

        content = route.calls.last.request.content
        self.assertIn(b'name="file0"; filename="first.pdf"', content)
        self.assertIn(b'name="file1"; filename="second.pdf"', content)

    def test_post_processing_endpoints(self):
        """Test the remaining PDF post-processing operations."""
        for path in ("split", "split-zip", "metadata", "compress", "encrypt", "url"):
            self.router.post(f"{BASE_URL}/pdf/{path}").mock(
                return_value=httpx.Response(200, content=path.encode())
            )

        self.assertEqual(self.client.split(b"%PDF", [2]), b"split")
        self.assertEqual(self.client.split_zip(b"%PDF", [[1], [2]]), b"split-zip")
        self.assertEqual(self.client.edit_metadata(b"%PDF", {"title": "T"}), b"metadata")
        self.assertEqual(self.client.compress(b"%PDF"), b"compress")
        self.assertEqual(self.client.encrypt(b"%PDF", "pw"), b"encrypt")
        self.assertEqual(self.client.url_to_pdf("https://example.com"), b"url")

    def test_render_template_many_and_extract(self):
        """Test a batch render returning a zip archive."""
        zip_bytes = make_zip([("0.pdf", b"%PDF-0"), ("1.pdf", b"%PDF-1")])
        self.router.post(f"{BASE_URL}/render/pdf/batch/tpl-1").mock(
            return_value=httpx.Response(200, content=zip_bytes)
        )

        result = self.client.render_template_many("tpl-1", [{"n": 0}, {"n": 1}])

        self.assertEqual(self.client.extract(result), [b"%PDF-0", b"%PDF-1"])
        written = self.client.extract_to_directory(result, self.root / "out")
        self.assertEqual([p.name for p in written], ["0.pdf", "1.pdf"])

    def test_render_many(self):
        """Test the ad-hoc batch endpoint."""
        route = self.router.post(f"{BASE_URL}/render/pdf/batch").mock(
            return_value=httpx.Response(200, content=b"PK")
        )

        self.assertEqual(self.client.render_many(Source.text("<p/>"), render_data_list=[{}]), b"PK")
        self.assertTrue(route.called)

    def test_render_template_and_save(self):
        """Test rendering a stored template and saving the result."""
        self.router.post(f"{BASE_URL}/render/pdf/tpl-1").mock(
            return_value=httpx.Response(200, content=b"%PDF-stored")
        )
        target = self.root / "out.pdf"

        self.client.save(self.client.render_template("tpl-1", {"a": 1}), target)

        self.assertEqual(target.read_bytes(), b"%PDF-stored")


class AsyncPDFClientTestCase(IsolatedAsyncioTestCase):
    """Test cases for AsyncPDFClient."""

    def setUp(self):
        """Start respx."""
        self.router = respx.mock(assert_all_called=False)
        self.router.start()
        self.addCleanup(self.router.stop)

    async def asyncSetUp(self):
        self.client = AsyncPDFClient(API_KEY)

    async def asyncTearDown(self):
        await self.client.aclose()

    async def test_render(self):
        """Test an async ad-hoc render."""
        route = self.router.post(f"{BASE_URL}/render/pdf").mock(
            return_value=httpx.Response(200, content=b"%PDF-async")
        )

        pdf = await self.client.render("<h1>{{ name }}</h1>", render_data={"name": "John"})

        self.assertEqual(pdf, b"%PDF-async")
        self.assertEqual(route.calls.last.request.headers["Authorization"], API_KEY)

    async def test_error(self):
        """Test that async calls raise the same errors."""
        self.router.get(f"{BASE_URL}/template/missing").mock(
            return_value=httpx.Response(404, text="not found")
        )

        with self.assertRaises(PDFApiError) as cm:
            await self.client.get_template("missing")

        self.assertEqual(cm.exception.status_code, 404)
        self.assertEqual(cm.exception.response_text, "not found")

    async def test_per_call_timeout(self):
        """Test that async operations forward a per-call timeout."""
        route = self.router.get(f"{BASE_URL}/template/t1").mock(
            return_value=httpx.Response(200, json={"id": "t1"})
        )

        await self.client.get_template("t1", timeout=4.0)

        self.assertEqual(route.calls.last.request.extensions["timeout"]["read"], 4.0)

    async def test_validation_sends_nothing(self):
        """Test that async validation failures never reach the transport."""
        with patch.object(self.client.http, "request") as mock_request:
            with self.assertRaises(PDFValidationError):
                await self.client.merge([b"%PDF"])

        mock_request.assert_not_called()

    async def test_delete_and_extract(self):
        """Test async delete and the archive helpers."""
        self.router.delete(f"{BASE_URL}/template/t1").mock(return_value=httpx.Response(204))

        self.assertTrue(await self.client.delete_template("t1"))
        self.assertEqual(self.client.extract(make_zip([("a", b"A")])), [b"A"])

    async def test_context_manager(self):
        """Test that the async client works as a context manager."""
        self.router.get(f"{BASE_URL}/token").mock(return_value=httpx.Response(200))

        async with AsyncPDFClient(API_KEY) as client:
            self.assertTrue(await client.validate_token())
