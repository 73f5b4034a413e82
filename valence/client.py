"""Asynchronous HTTP client for a co-processor service."""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Any

import httpx

from valence.hasher import HASH_LEN

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 25
DEFAULT_FREQUENCY_MS = 2000


class CoprocessorError(Exception):
    """The co-processor returned something that could not be used."""


class ProofTimeout(CoprocessorError):
    """A proof was not available before the deadline."""


def _b64encode(data: bytes) -> str:
    return base64.b64encode(bytes(data)).decode("ascii")


def _b64decode(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CoprocessorError(f"invalid base64 data: {exc}") from exc


def _field(data: Any, key: str) -> Any:
    return data.get(key) if isinstance(data, dict) else None


def _log_entries(data: Any) -> None:
    entries = _field(data, "log")
    if isinstance(entries, list):
        for entry in entries:
            if isinstance(entry, str):
                logger.debug("%s", entry)


def _byte_list(value: Any, name: str) -> bytes:
    if not isinstance(value, list) or not all(
        isinstance(b, int) and 0 <= b <= 255 for b in value
    ):
        raise CoprocessorError(f"invalid `{name}` field")
    return bytes(value)


def _hash(value: Any, name: str) -> bytes:
    data = _byte_list(value, name)
    if len(data) != HASH_LEN:
        raise CoprocessorError(f"`{name}` must be {HASH_LEN} bytes, got {len(data)}")
    return data


@dataclass(frozen=True)
class Proof:
    """A proof and its public inputs, both base64 encoded."""

    proof: str
    inputs: str

    @classmethod
    def from_bytes(cls, proof: bytes, inputs: bytes) -> "Proof":
        """Build a proof from raw bytes."""
        return cls(proof=_b64encode(proof), inputs=_b64encode(inputs))

    def decode(self) -> tuple[bytes, bytes]:
        """Return the raw proof and public inputs."""
        return _b64decode(self.proof), _b64decode(self.inputs)

    def to_base64(self) -> str:
        """Encode the whole proof as a single base64 string."""
        payload = json.dumps({"proof": self.proof, "inputs": self.inputs})
        return _b64encode(payload.encode("utf-8"))

    @classmethod
    def from_base64(cls, data: str) -> "Proof":
        """Decode a proof produced by :meth:`to_base64`."""
        try:
            value = json.loads(_b64decode(data))
        except ValueError as exc:
            raise CoprocessorError(f"invalid proof encoding: {exc}") from exc
        proof = _field(value, "proof")
        inputs = _field(value, "inputs")
        if not isinstance(proof, str) or not isinstance(inputs, str):
            raise CoprocessorError("invalid proof encoding")
        return cls(proof=proof, inputs=inputs)


@dataclass(frozen=True)
class AddedDomainBlock:
    """Outcome of appending a block to a domain."""

    domain: str
    prev_smt: bytes
    smt: bytes
    log: list[str]
    number: int
    root: bytes
    key: bytes
    payload: bytes

    @classmethod
    def from_json(cls, data: Any) -> "AddedDomainBlock":
        """Parse the service's JSON representation."""
        if not isinstance(data, dict):
            raise CoprocessorError("invalid added block response")
        domain = data.get("domain")
        number = data.get("number")
        log = data.get("log")
        if not isinstance(domain, str):
            raise CoprocessorError("invalid `domain` field")
        if not isinstance(number, int) or isinstance(number, bool) or number < 0:
            raise CoprocessorError("invalid `number` field")
        if not isinstance(log, list) or not all(isinstance(e, str) for e in log):
            raise CoprocessorError("invalid `log` field")
        return cls(
            domain=domain,
            prev_smt=_hash(data.get("prev_smt"), "prev_smt"),
            smt=_hash(data.get("smt"), "smt"),
            log=list(log),
            number=number,
            root=_hash(data.get("root"), "root"),
            key=_hash(data.get("key"), "key"),
            payload=_byte_list(data.get("payload"), "payload"),
        )

    def to_json(self) -> dict[str, Any]:
        """Render the JSON representation used by the service."""
        return {
            "domain": self.domain,
            "prev_smt": list(self.prev_smt),
            "smt": list(self.smt),
            "log": list(self.log),
            "number": self.number,
            "root": list(self.root),
            "key": list(self.key),
            "payload": list(self.payload),
        }


@dataclass(frozen=True)
class Client:
    """A co-processor client."""

    DEFAULT_COPROCESSOR = "https://service.coprocessor.valence.zone"

    coprocessor: str = field(default=DEFAULT_COPROCESSOR)

    @classmethod
    def local(cls) -> "Client":
        """Create a client for a co-processor on localhost."""
        return cls("http://127.0.0.1:37281")

    def with_coprocessor(self, coprocessor: str) -> "Client":
        """Return a client pointing at another co-processor address."""
        return replace(self, coprocessor=coprocessor)

    def uri(self, path: str) -> str:
        """Compute the URI of an API path."""
        return f"{self.coprocessor}/api/{path}"

    async def _send(self, method: str, path: str, body: Any = None) -> httpx.Response:
        async with httpx.AsyncClient(timeout=None) as http:
            if method == "GET":
                return await http.get(self.uri(path))
            return await http.post(self.uri(path), json=body)

    async def _json(self, method: str, path: str, body: Any = None) -> Any:
        response = await self._send(method, path, body)
        try:
            return response.json()
        except ValueError as exc:
            raise CoprocessorError(f"invalid JSON response: {exc}") from exc

    async def stats(self) -> Any:
        """Return the status of the co-processor."""
        return await self._json("GET", "stats")

    async def deploy_controller(
        self, controller: bytes, circuit: bytes, nonce: int | None = None
    ) -> str:
        """Deploy a controller with its circuit, returning the allocated id."""
        data = await self._json(
            "POST",
            "registry/controller",
            {
                "controller": _b64encode(controller),
                "circuit": _b64encode(circuit),
                "nonce": nonce,
            },
        )
        allocated = _field(data, "controller")
        if not isinstance(allocated, str):
            raise CoprocessorError("invalid response")
        return allocated

    async def deploy_domain(self, domain: str, controller: bytes) -> str:
        """Deploy a domain controller, returning the allocated id."""
        data = await self._json(
            "POST",
            "registry/domain",
            {"name": domain, "controller": _b64encode(controller)},
        )
        allocated = _field(data, "domain")
        if not isinstance(allocated, str):
            raise CoprocessorError("invalid response")
        return allocated

    async def get_storage_file(self, controller: str, path: str) -> bytes:
        """Fetch the contents of a file from a controller's storage.

        The storage is a FAT-16 virtual filesystem: names are limited to
        8 characters plus a 3 character extension, and case insensitive.
        """
        data = await self._json(
            "POST", f"registry/controller/{controller}/storage/fs", {"path": path}
        )
        contents = _field(data, "data")
        if not isinstance(contents, str):
            raise CoprocessorError("invalid response")
        return _b64decode(contents)

    async def get_witnesses(self, circuit: str, args: Any) -> Any:
        """Compute the witnesses of a controller for the given arguments."""
        data = await self._json(
            "POST", f"registry/controller/{circuit}/witnesses", {"args": args}
        )
        _log_entries(data)
        witnesses = _field(data, "witnesses")
        if witnesses is None:
            raise CoprocessorError("invalid witnesses response")
        return witnesses

    async def queue_proof(self, circuit: str, root: str | None, args: Any) -> str:
        """Queue a proof request and return the storage path it will be written to."""
        suffix = f"/{root}" if root is not None else ""
        path = f"registry/controller/{circuit}/prove{suffix}"

        tag = uuid.uuid4().int.to_bytes(16, "little").hex()[:8]
        output = f"/var/share/proofs/{tag}.bin"

        await self._send(
            "POST",
            path,
            {"args": args, "payload": {"cmd": "store", "path": output}},
        )
        return output

    async def get_proof(self, circuit: str, path: str) -> Proof | None:
        """Fetch a queued proof, or None when it is not ready yet."""
        response = await self._json(
            "POST", f"registry/controller/{circuit}/storage/fs", {"path": path}
        )
        data = _field(response, "data")
        if data is None:
            return None
        if not isinstance(data, str):
            raise CoprocessorError("unexpected data format")
        if not data:
            return None

        try:
            result = json.loads(_b64decode(data))
        except ValueError as exc:
            raise CoprocessorError(f"invalid proof result: {exc}") from exc

        _log_entries(result)

        if _field(result, "success") is not True:
            raise CoprocessorError("the proof was computed incorrectly")

        proof = _field(result, "proof")
        if not isinstance(proof, str):
            raise CoprocessorError("failed to get proof from response")
        return Proof.from_base64(proof)

    async def _poll(self, circuit: str, path: str, frequency: int) -> Proof:
        while True:
            proof = await self.get_proof(circuit, path)
            if proof is not None:
                return proof
            await asyncio.sleep(frequency / 1000)

    async def prove(self, circuit: str, args: Any) -> Proof:
        """Compute a proof with the default retries and polling frequency."""
        return await self.prove_with_params(
            circuit, None, DEFAULT_RETRIES, DEFAULT_FREQUENCY_MS, args
        )

    async def prove_with_root(self, circuit: str, root: str, args: Any) -> Proof:
        """Compute a proof against the given historical root."""
        return await self.prove_with_params(
            circuit, root, DEFAULT_RETRIES, DEFAULT_FREQUENCY_MS, args
        )

    async def prove_with_params(
        self,
        circuit: str,
        root: str | None,
        retries: int,
        frequency: int,
        args: Any,
    ) -> Proof:
        """Queue a proof and poll every `frequency` ms, for `retries` periods at most."""
        path = await self.queue_proof(circuit, root, args)
        deadline = retries * frequency / 1000
        try:
            return await asyncio.wait_for(self._poll(circuit, path, frequency), deadline)
        except asyncio.TimeoutError as exc:
            raise ProofTimeout("proof timeout exceeded") from exc

    async def get_vk(self, circuit: str) -> bytes:
        """Return the verifying key of a circuit."""
        data = await self._json("GET", f"registry/controller/{circuit}/vk")
        _log_entries(data)
        encoded = _field(data, "base64")
        if not isinstance(encoded, str):
            raise CoprocessorError("invalid vk response")
        return _b64decode(encoded)

    async def get_circuit(self, circuit: str) -> bytes:
        """Return the circuit bytecode."""
        data = await self._json("GET", f"registry/controller/{circuit}/circuit")
        encoded = _field(data, "base64")
        if not isinstance(encoded, str):
            raise CoprocessorError("invalid circuit response")
        return _b64decode(encoded)

    async def entrypoint(self, controller: str, args: Any) -> Any:
        """Call a controller's entrypoint and return its result."""
        data = await self._json(
            "POST", f"registry/controller/{controller}/entrypoint", args
        )
        _log_entries(data)
        if not isinstance(data, dict) or "ret" not in data:
            raise CoprocessorError("no response provided")
        return data["ret"]

    async def get_latest_domain_block(self, domain: str) -> Any:
        """Return the latest validated block of a domain."""
        return await self._json("GET", f"registry/domain/{domain}/latest")

    async def add_domain_block(self, domain: str, args: Any) -> AddedDomainBlock:
        """Append a block to a domain, validated by its controller."""
        data = await self._json("POST", f"registry/domain/{domain}", args)
        return AddedDomainBlock.from_json(data)