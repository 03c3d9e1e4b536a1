"""Shared fixtures: an in-process stand-in for the upstream servers and sample documents."""

import asyncio
import hashlib
import json
from collections import Counter
from types import SimpleNamespace
from typing import Dict, Optional, Set

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from ametrine.models import PlatformDescriptor


class FakeUpstream:
    """Serves fixed bodies by path and counts every request it sees."""

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.hanging: Set[str] = set()
        # path -> seconds to wait before each 1 KB chunk of the body
        self.trickle: Dict[str, float] = {}
        self.hits: Counter = Counter()
        self.release = asyncio.Event()
        self.server: Optional[TestServer] = None

    async def handle(self, request: web.Request) -> web.StreamResponse:
        self.hits[request.path] += 1
        if request.path in self.hanging:
            await self.release.wait()
        if request.path not in self.files:
            raise web.HTTPNotFound()
        if request.path in self.trickle:
            return await self._trickle(request, self.files[request.path], self.trickle[request.path])
        return web.Response(body=self.files[request.path])

    async def _trickle(self, request: web.Request, body: bytes, delay: float) -> web.StreamResponse:
        response = web.StreamResponse()
        response.content_length = len(body)
        await response.prepare(request)
        for start in range(0, len(body), 1024):
            await asyncio.sleep(delay)
            await response.write(body[start:start + 1024])
        await response.write_eof()
        return response

    def url(self, path: str) -> str:
        return str(self.server.make_url(path))

    @property
    def total_hits(self) -> int:
        return sum(self.hits.values())


@pytest_asyncio.fixture
async def upstream():
    fake = FakeUpstream()
    app = web.Application()
    app.router.add_get('/{tail:.*}', fake.handle)
    fake.server = TestServer(app)
    await fake.server.start_server()
    yield fake
    fake.release.set()
    await fake.server.close()


@pytest.fixture
def linux() -> PlatformDescriptor:
    return PlatformDescriptor(name='linux', architecture='x64')


LIBRARIES = [
    {
        "name": "org.ow2.asm:asm:9.6",
        "downloads": {"artifact": {"path": "org/ow2/asm/asm/9.6/asm-9.6.jar"}},
    },
    {
        "name": "ca.weblite:java-objc-bridge:1.1",
        "downloads": {"artifact": {"path": "ca/weblite/java-objc-bridge/1.1/java-objc-bridge-1.1.jar"}},
        "rules": [{"action": "disallow", "os": {"name": "linux"}}],
    },
    {
        "name": "org.lwjgl:lwjgl:3.3.3:natives-linux",
        "downloads": {"artifact": {"path": "org/lwjgl/lwjgl/3.3.3/lwjgl-3.3.3-natives-linux.jar"}},
        "rules": [{"action": "allow", "os": {"name": "linux"}}],
    },
]

ASSET_BODIES = {
    "minecraft/sounds/ambient/cave/cave1.ogg": b"cave sound",
    "minecraft/lang/de_de.json": b'{"menu.quit": "Spiel beenden"}',
    "icons/icon_16x16.png": b"\x89PNG fake icon",
}


@pytest.fixture
def mojang(upstream: FakeUpstream) -> SimpleNamespace:
    """
    Publishes a manifest with release 1.21, its version document, a
    three-object asset index and every artifact on the fake upstream.
    """
    objects = {}
    for name, body in ASSET_BODIES.items():
        digest = hashlib.sha1(body).hexdigest()
        objects[name] = {"hash": digest, "size": len(body)}
        upstream.files[f"/resources/{digest[:2]}/{digest}"] = body

    # Deliberately not what json.dumps would produce.
    asset_index_raw = b'{ "objects" :\n  ' + json.dumps(objects, indent=3).encode() + b'\n}\n'
    upstream.files["/indexes/17.json"] = asset_index_raw

    for lib in LIBRARIES:
        path = lib["downloads"]["artifact"]["path"]
        upstream.files[f"/libraries/{path}"] = f"jar:{path}".encode()
    upstream.files["/client/1.21.jar"] = b"client jar bytes"

    version_doc = {
        "id": "1.21",
        "type": "release",
        "mainClass": "net.minecraft.client.main.Main",
        "assets": "17",
        "assetIndex": {"id": "17", "url": upstream.url("/indexes/17.json")},
        "downloads": {"client": {"url": upstream.url("/client/1.21.jar")}},
        "javaVersion": {"component": "java-runtime-delta", "majorVersion": 21},
        "libraries": LIBRARIES,
    }
    upstream.files["/versions/1.21.json"] = json.dumps(version_doc).encode()

    manifest = {
        "latest": {"release": "1.21", "snapshot": "24w14a"},
        "versions": [
            {"id": "24w14a", "type": "snapshot", "url": upstream.url("/versions/24w14a.json")},
            {"id": "1.21", "type": "release", "url": upstream.url("/versions/1.21.json")},
        ],
    }
    upstream.files["/mc/game/version_manifest_v2.json"] = json.dumps(manifest).encode()

    return SimpleNamespace(
        manifest_url=upstream.url("/mc/game/version_manifest_v2.json"),
        libraries_endpoint=upstream.url("/libraries/"),
        resources_endpoint=upstream.url("/resources/"),
        asset_index_raw=asset_index_raw,
        asset_count=len(objects),
        version_doc=version_doc,
    )
