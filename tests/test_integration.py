"""
Integration tests for the Print-Ready Output Generator.

Tests the complete pipeline from JSON request to PDF download,
including error responses and edge cases.
"""

import io
from unittest.mock import patch

import pytest
from pypdf import PdfReader

from printready.errors import CapacityError
from tests.conftest import make_image_bytes, make_pattern_image, png_bytes, to_data_url


def read_pdf(response) -> PdfReader:
    return PdfReader(io.BytesIO(response.data))


class TestHealth:
    """Test the health endpoint."""

    def test_health_check(self, client):
        """Test that the health endpoint reports the server is up."""
        response = client.get('/api/health')

        assert response.status_code == 200
        assert response.get_json() == {'status': 'ok', 'message': 'Server is running'}


class TestGeneratePdf:
    """Test successful PDF generation."""

    def test_single_sided_pdf(self, client, sample_request):
        """Test a plain single-page print."""
        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.data.startswith(b'%PDF-')
        assert 'attachment' in response.headers['Content-Disposition']
        assert 'print-ready.pdf' in response.headers['Content-Disposition']

        reader = read_pdf(response)
        assert len(reader.pages) == 1
        assert [round(float(v)) for v in reader.pages[0].mediabox] == [0, 0, 72, 108]

    def test_custom_filename(self, client, sample_request):
        """Test that the requested filename is sanitized and used."""
        sample_request['filename'] = 'Order 42'
        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 200
        assert 'Order_42.pdf' in response.headers['Content-Disposition']

    def test_bleed_and_crop_marks(self, client, sample_request):
        """Test that bleed enlarges the page and marks are drawn."""
        sample_request['includeBleed'] = True
        sample_request['includeCropMarks'] = True

        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 200
        page = read_pdf(response).pages[0]
        assert [round(float(v)) for v in page.mediabox] == [0, 0, 90, 126]
        assert [round(float(v)) for v in page.trimbox] == [9, 9, 81, 117]
        assert page.get_contents().get_data().count(b' l S') == 8

    def test_double_sided_pdf(self, client, sample_request):
        """Test that a back image adds a second page in the same geometry."""
        back = make_image_bytes((500, 500), 'JPEG', color=(30, 30, 200))
        sample_request['backImageBase64'] = to_data_url(back, 'image/jpeg')
        sample_request['backTransform'] = {'rotation': 270, 'zoom': 1.1, 'panX': 5, 'panY': -5}
        sample_request['includeBleed'] = True

        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 200
        reader = read_pdf(response)
        assert len(reader.pages) == 2
        assert reader.pages[0].mediabox == reader.pages[1].mediabox

    def test_rotated_zoomed_panned(self, client, sample_request):
        """Test a transformed pattern image produces a full-resolution page image."""
        sample_request['imageBase64'] = to_data_url(png_bytes(make_pattern_image((900, 600))))
        sample_request['transform'] = {'rotation': 90, 'zoom': 1.5, 'panX': 30, 'panY': -40}

        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 200
        image = read_pdf(response).pages[0].images[0].image
        assert image.size == (300, 450)

    def test_low_resolution_source_still_renders(self, client, sample_request):
        """Test that an undersized source is clamped and upscaled rather than rejected."""
        sample_request['imageBase64'] = to_data_url(make_image_bytes((40, 30)))
        sample_request['transform'] = {'rotation': 0, 'zoom': 3, 'panX': 500, 'panY': 500}

        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 200


class TestErrorResponses:
    """Test error mapping to HTTP status codes."""

    def test_missing_fields(self, client):
        """Test that an incomplete body is a 400 ValidationError."""
        response = client.post('/api/generate-pdf', json={'imageBase64': 'abc'})

        assert response.status_code == 400
        body = response.get_json()
        assert body['error_type'] == 'ValidationError'
        assert body['details']['errors']

    def test_non_json_body(self, client):
        """Test that a non-JSON body is rejected."""
        response = client.post('/api/generate-pdf', data='not json', content_type='text/plain')

        assert response.status_code == 400
        assert response.get_json()['error_type'] == 'ValidationError'

    def test_invalid_rotation(self, client, sample_request):
        """Test that a non-right-angle rotation is a 400."""
        sample_request['transform']['rotation'] = 45

        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 400
        body = response.get_json()
        assert body['error_type'] == 'InvalidRotationError'
        assert body['details']['rotation'] == 45

    def test_zoom_below_one(self, client, sample_request):
        sample_request['transform']['zoom'] = 0.5

        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 400
        assert response.get_json()['error_type'] == 'InvalidZoomError'

    def test_absurd_print_size(self, client, sample_request):
        """Test that a finite but unrenderable size is a 400, not a crash."""
        sample_request['printDimensions'] = {'width': 1e307, 'height': 1}

        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 400
        assert response.get_json()['error_type'] == 'InvalidDimensionsError'

    def test_huge_print_size(self, client, sample_request):
        """Test that sizes past the pixel budget are rejected before decoding."""
        sample_request['printDimensions'] = {'width': 1e200, 'height': 1}

        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 400
        assert response.get_json()['error_type'] == 'OutputTooLargeError'

    def test_string_zoom(self, client, sample_request):
        sample_request['transform']['zoom'] = '1.5'

        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 400

    def test_undecodable_image(self, client, sample_request):
        """Test that bytes which are not an image are a 422 DecodeError."""
        sample_request['imageBase64'] = to_data_url(b'definitely not a png')

        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 422
        body = response.get_json()
        assert body['error_type'] == 'DecodeError'
        assert body['suggestions']

    def test_invalid_base64(self, client, sample_request):
        sample_request['imageBase64'] = 'data:image/png;base64,%%%%'

        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 422

    def test_bad_back_image_fails_whole_job(self, client, sample_request):
        """Test that a broken back side fails the request without a partial PDF."""
        sample_request['backImageBase64'] = to_data_url(b'broken')
        sample_request['backTransform'] = {'rotation': 0, 'zoom': 1}

        response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 422
        assert response.mimetype == 'application/json'

    def test_server_busy(self, client, sample_request):
        """Test that an exhausted job pool is a 503."""
        runner = client.application.extensions['printready_runner']
        with patch.object(runner, 'run', side_effect=CapacityError("busy")):
            response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 503
        assert response.get_json()['error_type'] == 'CapacityError'

    def test_unexpected_error(self, client, sample_request):
        """Test that unexpected failures become a generic 500 without internals."""
        runner = client.application.extensions['printready_runner']
        with patch.object(runner, 'run', side_effect=RuntimeError("secret internals")):
            response = client.post('/api/generate-pdf', json=sample_request)

        assert response.status_code == 500
        body = response.get_json()
        assert body['error_type'] == 'InternalError'
        assert 'secret internals' not in response.get_data(as_text=True)
        assert body['details']['request_id']

    def test_body_too_large(self, client):
        """Test that bodies over MAX_CONTENT_LENGTH are a JSON 413."""
        oversized = b'{"imageBase64": "' + b'A' * (6 * 1024 * 1024) + b'"}'

        response = client.post('/api/generate-pdf', data=oversized, content_type='application/json')

        assert response.status_code == 413
        assert response.get_json()['details']['max_content_length'] == 5 * 1024 * 1024

    @pytest.mark.parametrize('method', ['get', 'put'])
    def test_wrong_method(self, client, method):
        response = getattr(client, method)('/api/generate-pdf')
        assert response.status_code == 405
