#!/usr/bin/env python3
"""
Tests for the upstream fetcher and redirect resolution
"""
import unittest
from unittest import mock

import requests
from requests.structures import CaseInsensitiveDict

from proxy_errors import SubmissionError, UpstreamUnavailableError
from redirect_resolver import resolve_redirect
from upstream_fetcher import UpstreamResponse, fetch_upstream, submit_form


def fake_response(status_code=200, headers=None, content=b'', encoding='utf-8', url='https://x.com/'):
    resp = mock.Mock(spec=requests.Response)
    resp.status_code = status_code
    resp.headers = CaseInsensitiveDict(headers or {})
    resp.content = content
    resp.encoding = encoding
    resp.url = url
    return resp


class TestFetchUpstream(unittest.TestCase):

    @mock.patch('upstream_fetcher.requests.request')
    def test_browser_headers_and_no_redirects(self, mock_request):
        mock_request.return_value = fake_response(content=b'<html></html>')

        upstream = fetch_upstream('https://x.com/')

        kwargs = mock_request.call_args.kwargs
        self.assertEqual(kwargs['method'], 'GET')
        self.assertNotIn('data', kwargs)
        self.assertEqual(kwargs['url'], 'https://x.com/')
        self.assertFalse(kwargs['allow_redirects'])
        self.assertTrue(kwargs['timeout'])
        for name in ['User-Agent', 'Accept', 'Accept-Language', 'Accept-Encoding',
                     'Connection', 'Upgrade-Insecure-Requests']:
            self.assertIn(name, kwargs['headers'])
        self.assertEqual(upstream.status_code, 200)
        self.assertEqual(upstream.text, '<html></html>')

    @mock.patch('upstream_fetcher.requests.request')
    def test_raw_redirect_exposed(self, mock_request):
        mock_request.return_value = fake_response(302, {'Location': '/new'})

        upstream = fetch_upstream('https://x.com/old')

        self.assertTrue(upstream.is_redirect)
        self.assertEqual(upstream.location, '/new')
        self.assertEqual(upstream.headers['location'], '/new')

    @mock.patch('upstream_fetcher.requests.request')
    def test_follow_redirects_and_timeout_passed_through(self, mock_request):
        mock_request.return_value = fake_response()

        fetch_upstream('https://x.com/', follow_redirects=True, timeout=3)

        kwargs = mock_request.call_args.kwargs
        self.assertTrue(kwargs['allow_redirects'])
        self.assertEqual(kwargs['timeout'], 3)

    @mock.patch('upstream_fetcher.requests.request')
    def test_network_failures_become_upstream_errors(self, mock_request):
        for exc in [requests.exceptions.ConnectionError('Name or service not known'),
                    requests.exceptions.Timeout('timed out')]:
            with self.subTest(exc=exc):
                mock_request.side_effect = exc
                with self.assertRaises(UpstreamUnavailableError) as ctx:
                    fetch_upstream('https://nowhere.invalid/')
                self.assertEqual(ctx.exception.status_code, 500)
                self.assertTrue(ctx.exception.message.startswith('Failed to fetch website: '))
                self.assertIn(str(exc), ctx.exception.message)


class TestSubmitForm(unittest.TestCase):

    @mock.patch('upstream_fetcher.requests.request')
    def test_form_posted_urlencoded(self, mock_request):
        mock_request.return_value = fake_response(content=b'thanks')
        fields = [('q', 'a'), ('tag', '1'), ('tag', '2')]

        upstream = submit_form('https://x.com/submit', fields)

        kwargs = mock_request.call_args.kwargs
        self.assertEqual(kwargs['method'], 'POST')
        self.assertEqual(kwargs['data'], fields)
        self.assertEqual(kwargs['headers']['Content-Type'], 'application/x-www-form-urlencoded')
        self.assertEqual(upstream.text, 'thanks')

    @mock.patch('upstream_fetcher.requests.request')
    def test_failure_becomes_submission_error(self, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError('refused')

        with self.assertRaises(SubmissionError) as ctx:
            submit_form('https://x.com/submit', [])
        self.assertEqual(ctx.exception.message, 'Failed to submit form: refused')


def real_response(content, content_type):
    """requests.Response populated the way HTTPAdapter.build_response does"""
    resp = requests.Response()
    resp.status_code = 200
    resp.headers = CaseInsensitiveDict({'Content-Type': content_type})
    resp._content = content
    resp.encoding = requests.utils.get_encoding_from_headers(resp.headers)
    resp.url = 'https://x.com/'
    return resp


class TestUpstreamResponse(unittest.TestCase):

    def test_text_uses_declared_encoding(self):
        upstream = UpstreamResponse(200, body='café'.encode('latin-1'), encoding='latin-1')
        self.assertEqual(upstream.text, 'café')

    def test_text_defaults_to_utf8_ignoring_bad_bytes(self):
        upstream = UpstreamResponse(200, body=b'ok\xff')
        self.assertEqual(upstream.text, 'ok')

    def test_utf8_page_without_charset_not_decoded_as_latin1(self):
        resp = real_response('café – naïve'.encode('utf-8'), 'text/html')
        self.assertEqual(resp.encoding, 'ISO-8859-1')

        upstream = UpstreamResponse.from_requests(resp)

        self.assertIsNone(upstream.encoding)
        self.assertEqual(upstream.text, 'café – naïve')

    def test_declared_charset_kept(self):
        resp = real_response('café'.encode('latin-1'), 'text/html; charset=ISO-8859-1')

        upstream = UpstreamResponse.from_requests(resp)

        self.assertEqual(upstream.text, 'café')


class TestResolveRedirect(unittest.TestCase):

    def test_relative_location(self):
        upstream = UpstreamResponse(302, headers={'Location': '/new'})
        self.assertEqual(
            resolve_redirect(upstream, 'https://x.com'),
            '/website?url=https%3A%2F%2Fx.com%2Fnew',
        )

    def test_absolute_location(self):
        upstream = UpstreamResponse(301, headers={'Location': 'https://www.x.com/'})
        self.assertEqual(
            resolve_redirect(upstream, 'https://x.com'),
            '/website?url=https%3A%2F%2Fwww.x.com%2F',
        )

    def test_redirect_without_location_is_content(self):
        self.assertIsNone(resolve_redirect(UpstreamResponse(304), 'https://x.com'))

    def test_non_redirect_ignored(self):
        upstream = UpstreamResponse(200, headers={'Location': '/new'})
        self.assertIsNone(resolve_redirect(upstream, 'https://x.com'))


if __name__ == '__main__':
    unittest.main()
