"""
Unit tests for route handlers.
"""

from pathlib import Path

import pytest

from tinyhttpd.config import ServerConfig
from tinyhttpd.handlers import dispatch, echo, method_not_allowed, not_found, root, user_agent
from tinyhttpd.handlers.files import is_safe_relative_path, serve_file
from tinyhttpd.http.request import HTTPRequest, Method
from tinyhttpd.http.router import Route, RouteMatch
from tinyhttpd.http.status_codes import HTTPStatus


def make_request(target: str = "/", headers: tuple = ()) -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(method=Method.GET, target=target, headers=headers)


class TestBasicHandlers:

    def test_root(self):
        response = root()

        assert response.status == HTTPStatus.OK
        assert response.body == b"OK\n"

    @pytest.mark.parametrize("text", ["", "hello", "a?b=1", "with spaces%20", "x" * 500])
    def test_echo(self, text: str):
        response = echo(text)

        assert response.status == HTTPStatus.OK
        assert response.body == text.encode()
        assert response.get_header("Content-Type") == "text/plain"
        assert response.get_header("Echo-Length") == str(len(text))

    def test_echo_length_counts_bytes(self):
        response = echo("caf\xe9")
        assert response.get_header("Echo-Length") == "4"

    def test_user_agent_present(self):
        response = user_agent(make_request(headers=(("User-Agent", "foo"),)))

        assert response.status == HTTPStatus.OK
        assert response.body == b"foo"
        assert response.get_header("Content-Type") == "text/plain"
        assert b"Content-Length: 3\r\n" in response.to_bytes()

    def test_user_agent_missing(self):
        response = user_agent(make_request(headers=(("Host", "x"),)))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body == b"No User-Agent header provided\n"

    def test_user_agent_header_name_case_sensitive(self):
        response = user_agent(make_request(headers=(("user-agent", "foo"),)))
        assert response.status == HTTPStatus.BAD_REQUEST

    def test_not_found(self):
        response = not_found()

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b"NOT FOUND\n"

    def test_method_not_allowed(self):
        response = method_not_allowed()

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.body == b"METHOD NOT ALLOWED\n"


class TestServeFile:

    def test_serves_file_bytes(self, serving_dir: Path):
        response = serve_file("hello.txt", str(serving_dir))

        assert response.status == HTTPStatus.OK
        assert response.body == b"Hello, files!\n"
        assert response.get_header("Content-Type") == "application/octet-stream"

    def test_serves_binary_and_nested(self, serving_dir: Path):
        assert serve_file("blob.bin", str(serving_dir)).body == bytes(range(256))
        assert serve_file("nested/deep.txt", str(serving_dir)).body == b"deep"

    def test_reads_fresh_content_each_time(self, serving_dir: Path):
        assert serve_file("hello.txt", str(serving_dir)).body == b"Hello, files!\n"

        (serving_dir / "hello.txt").write_bytes(b"changed")

        assert serve_file("hello.txt", str(serving_dir)).body == b"changed"

    def test_no_serving_directory(self):
        response = serve_file("hello.txt", None)

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == b"ERROR: Unable to serve files\n"

    def test_empty_path(self, serving_dir: Path):
        response = serve_file("", str(serving_dir))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body == b"ERROR: Invalid file path\n"

    def test_missing_file(self, serving_dir: Path):
        response = serve_file("nope.txt", str(serving_dir))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == b"ERROR: Unable to serve file, It may not exist!\n"

    def test_directory_is_not_a_file(self, serving_dir: Path):
        response = serve_file("nested", str(serving_dir))
        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR

    @pytest.mark.parametrize("path", [
        "../secret.txt",
        "../../etc/passwd",
        "nested/../../secret.txt",
        "/etc/passwd",
        "a\x00b",
    ])
    def test_traversal_rejected(self, tmp_path: Path, path: str):
        served = tmp_path / "served"
        served.mkdir()
        (tmp_path / "secret.txt").write_bytes(b"secret")

        response = serve_file(path, str(served))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body == b"ERROR: Invalid file path\n"

    def test_symlink_escaping_directory_rejected(self, tmp_path: Path):
        served = tmp_path / "served"
        served.mkdir()
        secret = tmp_path / "secret.txt"
        secret.write_bytes(b"TOP SECRET")
        (served / "link").symlink_to(secret)

        response = serve_file("link", str(served))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body == b"ERROR: Invalid file path\n"

    def test_symlink_inside_directory_served(self, serving_dir: Path):
        (serving_dir / "alias").symlink_to(serving_dir / "hello.txt")

        response = serve_file("alias", str(serving_dir))

        assert response.status == HTTPStatus.OK
        assert response.body == b"Hello, files!\n"

    def test_dots_inside_names_allowed(self):
        assert is_safe_relative_path("archive..tar")
        assert is_safe_relative_path("dir/.hidden")
        assert is_safe_relative_path("%2e%2e/x")


class TestDispatch:

    @pytest.fixture
    def config(self, serving_dir: Path) -> ServerConfig:
        return ServerConfig(serving_directory=str(serving_dir))

    @pytest.mark.parametrize("match, status, body", [
        (RouteMatch(Route.ROOT), 200, b"OK\n"),
        (RouteMatch(Route.ECHO, "abc"), 200, b"abc"),
        (RouteMatch(Route.FILES, "hello.txt"), 200, b"Hello, files!\n"),
        (RouteMatch(Route.NOT_FOUND), 404, b"NOT FOUND\n"),
        (RouteMatch(Route.METHOD_NOT_ALLOWED), 405, b"METHOD NOT ALLOWED\n"),
    ])
    def test_dispatch_table(self, config: ServerConfig, match, status, body):
        response = dispatch(match, make_request(), config)

        assert response.status == status
        assert response.body == body

    def test_dispatch_user_agent(self, config: ServerConfig):
        request = make_request("/user-agent", (("User-Agent", "ua/1.0"),))
        response = dispatch(RouteMatch(Route.USER_AGENT), request, config)

        assert response.body == b"ua/1.0"

    def test_dispatch_files_uses_config_directory(self):
        response = dispatch(RouteMatch(Route.FILES, "hello.txt"), make_request(), ServerConfig())
        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
