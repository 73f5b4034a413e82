# valence

Python tools for a Valence co-processor service and for the controllers that
run on it.

## Contents

- `valence.client`
  - `Client` is an asynchronous HTTP client for the co-processor API, built on
    `httpx`. It can deploy controllers and domains, read storage files, compute
    witnesses, queue proofs and poll for them, fetch verifying keys and
    circuits, call controller entrypoints, read the latest domain block and add
    domain blocks.
  - `Proof` holds a base64 proof and its base64 public inputs.
  - `AddedDomainBlock` describes the result of adding a block.
  - If the service answers with something unusable, the client raises
    `CoprocessorError`. If a proof does not arrive in time, it raises
    `ProofTimeout`.
- `valence.hasher.Sp1Hasher` provides SHA-256 hashing with domain separation.
  - `hash` and `digest` use the `0x00` prefix.
  - `merge` uses the `0x01` prefix and takes two 32-byte hashes.
  - `key` hashes a context string followed by data.
- `valence.zkvm`
  - `Mode` lists the prover modes. `Mode.parse` accepts `mock`, `cpu`, `gpu`
    and `network`, and every one of them currently selects `Mode.MOCK`. Any
    other name raises `ValueError`.
  - `KeyCache` is a thread-safe, bounded, least-recently-used cache keyed by
    controller id. It has `get_or_insert` and `pop`.
- `valence.runtime` is a process-wide virtual controller runtime. It holds the
  arguments, the return value, the raw storage, the controller identifier and
  the log. Use `args`/`set_args`, `ret`, `get_raw_storage`/`set_raw_storage`,
  `get_controller`, `log` and `runtime()` to take a snapshot, and
  `initialize_runtime`/`initialize_default_runtime` to reset the controller id
  and the storage.
- `valence.memory`
  - `LinearMemory` is a flat byte memory.
  - `read_buffer`, `read_hash`, `read_string`, `read_json` and `write_buffer`
    move data in and out of that memory. On failure they raise `HostError`,
    which carries a `ReturnCode`.
- `valence.host.HostRuntime` holds the state of one controller call: the
  context, the arguments and the VM, plus the collected return value, log and
  panic message.
- `valence.imports` holds the host functions a controller calls: `panic`,
  `args`, `ret`, `get_storage_file`, `set_storage_file`, `get_raw_storage`,
  `set_raw_storage`, `get_controller`, `get_historical` and `log`.
  - They return the number of bytes written, `ReturnCode.SUCCESS`, or a
    negative `ReturnCode` value.
  - Passing `None` as the memory yields `ReturnCode.MEMORY_EXPORT`.

## Installation

```
pip install valence
```

For the test suite:

```
pip install "valence[test]"
```

## Client example

```python
import asyncio

from valence.client import Client


async def main():
    client = Client.local()
    controller = await client.deploy_controller(b"<wasm>", b"<elf>", nonce=15)
    proof = await client.prove(controller, {"value": 42})
    print(proof.proof, proof.inputs)


asyncio.run(main())
```

Client addresses:

- `Client()` targets the public co-processor at
  `https://service.coprocessor.valence.zone`.
- `Client.local()` targets `http://127.0.0.1:37281`.
- `with_coprocessor(address)` returns a client for any other address.

Polling and timeouts:

- `prove` and `prove_with_root` queue the proof, then poll every 2 seconds.
  They give up with `ProofTimeout` after 25 × 2 seconds.
- `prove_with_params` takes the retry count and the polling frequency, in
  milliseconds. The deadline is their product.

## Hashing example

```python
from valence.hasher import Sp1Hasher

root = Sp1Hasher.hash(b"payload")
key = Sp1Hasher.key("domain", root)
node = Sp1Hasher.merge(root, key)
```

## What this package does not do

- It has no prover. `Mode` and `KeyCache` only name modes and cache keys; no
  proofs are generated or verified locally.
- It has no WebAssembly engine. The host functions in `valence.imports` work on
  a `LinearMemory` and on an execution context object that you supply, but
  nothing here loads or runs controller modules.
- It has no storage backend, filesystem image or historical tree. The context
  object must provide storage files, raw storage and the historical root.
- There is no HTTP or Alchemy host call, and no state-proof or domain-block
  host call.
- There is no command-line program and no server.