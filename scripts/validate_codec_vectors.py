from __future__ import annotations

from thurin.credentials.test_vectors import codec_vectors


def main() -> int:
    data = codec_vectors.load_vectors()
    errors = codec_vectors.validate_vectors(data)
    if errors:
        for error in errors:
            print(f"codec_vectors.json: {error}")
        return 1
    print("codec_vectors.json: OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
