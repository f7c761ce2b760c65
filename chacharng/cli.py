from __future__ import annotations

import sys
import argparse
import json as _json

from typing import List, Optional

from chacharng.constants import DEFAULT_ROUNDS, INITIAL_COUNTER
from chacharng.entropy import DeviceEntropy
from chacharng.errors import ChaChaRngError
from chacharng.generator import ChaChaGenerator
from chacharng.selftest import run_selftest, cross_check


def _parse_hex(value: Optional[str], what: str) -> Optional[bytes]:
    if value is None:
        return None
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise ValueError(f"{what} must be hexadecimal") from None


def _build_generator(
    *,
    key_hex: Optional[str],
    nonce_hex: Optional[str],
    passphrase: Optional[str],
    salt_hex: Optional[str],
    device: Optional[str],
    counter: int,
    rounds: int,
) -> ChaChaGenerator:
    """Pick the seeding mode from the given options.

    Args:
        key_hex/nonce_hex: Explicit key material; both or neither.
        passphrase/salt_hex: Argon2id-derived key material; both or neither.
        device: Entropy device for system seeding (default: os.urandom).
        counter: Starting block counter (explicit and passphrase modes only).
        rounds: ChaCha round count.
    """
    key = _parse_hex(key_hex, "--key")
    nonce = _parse_hex(nonce_hex, "--nonce")
    salt = _parse_hex(salt_hex, "--salt")
    if (key is None) != (nonce is None):
        raise ValueError("--key and --nonce must be given together")
    if (passphrase is None) != (salt is None):
        raise ValueError("--passphrase and --salt must be given together")
    if key is not None and passphrase is not None:
        raise ValueError("--key/--nonce and --passphrase/--salt are mutually exclusive")
    if device is not None and (key is not None or passphrase is not None):
        raise ValueError("--device cannot be combined with explicit or passphrase seeding")

    if key is not None:
        return ChaChaGenerator.from_key(key, nonce, counter=counter, rounds=rounds)
    if passphrase is not None:
        return ChaChaGenerator.from_passphrase(passphrase, salt, counter=counter, rounds=rounds)
    if counter != INITIAL_COUNTER:
        print("Warning: --counter ignored for entropy-seeded streams", file=sys.stderr)
    if not device:
        return ChaChaGenerator.from_system(None, rounds=rounds)
    with DeviceEntropy(device) as entropy:
        return ChaChaGenerator.from_system(entropy, rounds=rounds)


def cmd_generate(
    count: int,
    *,
    key_hex: Optional[str] = None,
    nonce_hex: Optional[str] = None,
    passphrase: Optional[str] = None,
    salt_hex: Optional[str] = None,
    device: Optional[str] = None,
    counter: int = INITIAL_COUNTER,
    rounds: int = DEFAULT_ROUNDS,
    fmt: str = "hex",
    output: Optional[str] = None,
) -> bytes:
    if count < 0:
        raise ValueError("--count must be non-negative")
    with _build_generator(
        key_hex=key_hex,
        nonce_hex=nonce_hex,
        passphrase=passphrase,
        salt_hex=salt_hex,
        device=device,
        counter=counter,
        rounds=rounds,
    ) as gen:
        data = gen.next_bytes(count)

    payload = data if fmt == "raw" else (data.hex() + "\n").encode("ascii")
    if output:
        with open(output, "wb") as fh:
            fh.write(payload)
    else:
        sys.stdout.buffer.write(payload)
        sys.stdout.flush()
    return data


def cmd_selftest(*, cross_samples: int = 0, as_json: bool = False) -> bool:
    results = run_selftest()
    if cross_samples > 0:
        results.extend(cross_check(cross_samples))
    success = all(r.ok for r in results)
    if as_json:
        print(_json.dumps({
            "ok": success,
            "results": [{"name": r.name, "ok": r.ok, "detail": r.detail} for r in results],
        }, indent=2))
    else:
        for r in results:
            status = "OK" if r.ok else "FAIL"
            line = f"{status:4} {r.name}"
            if r.detail:
                line += f": {r.detail}"
            print(line)
        passed = sum(1 for r in results if r.ok)
        print(f"{passed}/{len(results)} checks passed")
    return success


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="chacharng",
        description="Deterministic ChaCha keystream generator",
        epilog=(
            "Never reuse a (key, nonce) pair for independent streams."
        ),
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_gen = sub.add_parser("generate", help="Emit keystream bytes")
    ap_gen.add_argument("-n", "--count", type=int, default=64, help="Number of bytes (default 64)")
    ap_gen.add_argument("--key", help="32-byte key as hex")
    ap_gen.add_argument("--nonce", help="12-byte nonce as hex")
    ap_gen.add_argument("--passphrase", help="Derive key and nonce with Argon2id")
    ap_gen.add_argument("--salt", help="Argon2id salt as hex (at least 8 bytes)")
    ap_gen.add_argument("--device", help="Entropy device for seeding (default: OS CSPRNG)")
    ap_gen.add_argument("--counter", type=int, default=INITIAL_COUNTER, help="Starting block counter (default 1)")
    ap_gen.add_argument("--rounds", type=int, default=DEFAULT_ROUNDS, help="ChaCha rounds: 8, 12 or 20 (default 20)")
    ap_gen.add_argument("--format", choices=["hex", "raw"], default="hex", help="Output encoding (default hex)")
    ap_gen.add_argument("--output", "-o", help="Write to this file instead of stdout")

    ap_self = sub.add_parser("selftest", help="Run RFC 7539 known-answer tests")
    ap_self.add_argument("--cross-check", type=int, default=0, help="Also compare N random blocks against PyCryptodomex")
    ap_self.add_argument("--json", action="store_true", help="Emit JSON result summary")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "generate":
            cmd_generate(
                args.count,
                key_hex=args.key,
                nonce_hex=args.nonce,
                passphrase=args.passphrase,
                salt_hex=args.salt,
                device=args.device,
                counter=args.counter,
                rounds=args.rounds,
                fmt=args.format,
                output=args.output,
            )
        elif args.cmd == "selftest":
            success = cmd_selftest(cross_samples=args.cross_check, as_json=args.json)
            sys.exit(0 if success else 1)
        else:
            raise RuntimeError("Unknown command")
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (ChaChaRngError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
