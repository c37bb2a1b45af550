from __future__ import annotations

import argparse
import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy.orm import Session

from bepawa_care.ai.knowledge import add_knowledge
from bepawa_care.db import Base, SessionLocal, engine


BATCH_SIZE = 100
_SUFFIXES = {".md", ".mdx", ".txt"}
_LANGS = {"en", "sw"}


@dataclass(frozen=True)
class SourceFile:
    path: Path
    rel: Path
    content: str


def read_markdown_files(root: Path) -> list[SourceFile]:
    files: list[SourceFile] = []
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix.lower() in _SUFFIXES:
            files.append(SourceFile(path=path, rel=path.relative_to(root), content=path.read_text(encoding="utf-8")))
    return files


def infer_topic_and_lang(rel: Path) -> tuple[str, str | None, str]:
    """``stress/en/box.md`` -> ``("stress", "en", "box")``; flat files fall back to ``general``."""
    parts = rel.parts
    title = re.sub(r"[-_]", " ", rel.stem)
    topic = "general"
    lang: str | None = None
    if len(parts) >= 3:
        topic = parts[0]
        maybe_lang = parts[1].lower()
        if maybe_lang in _LANGS:
            lang = maybe_lang
    elif len(parts) == 2:
        topic = parts[0]
    return topic, lang, title


def chunk_text(text_value: str, *, size: int = 800, overlap: int = 120) -> list[str]:
    cleaned = re.sub(r"\n{3,}", "\n\n", (text_value or "").replace("\r\n", "\n")).strip()
    if not cleaned:
        return []
    chunks: list[str] = []
    start = 0
    while start < len(cleaned):
        end = min(len(cleaned), start + size)
        piece = cleaned[start:end]
        last_break = piece.rfind("\n\n")
        if last_break > size * 0.6:
            piece = piece[: last_break + 2]
        chunks.append(piece.strip())
        if end >= len(cleaned):
            break
        start += max(1, len(piece) - overlap)
    return [c for c in chunks if c]


def prepare_rows(
    files: list[SourceFile],
    *,
    topic: str | None = None,
    lang: str | None = None,
    chunk_size: int = 800,
    overlap: int = 120,
) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for f in files:
        if topic and (len(f.rel.parts) < 2 or f.rel.parts[0] != topic):
            continue
        file_topic, inferred_lang, title = infer_topic_and_lang(f.rel)
        for chunk in chunk_text(f.content, size=chunk_size, overlap=overlap):
            rows.append(
                {
                    "topic": file_topic,
                    "lang": lang or inferred_lang or "en",
                    "title": title,
                    "chunk_text": chunk,
                }
            )
    return rows


async def ingest(db: Session, rows: list[dict[str, Any]], *, batch_size: int = BATCH_SIZE) -> int:
    inserted = 0
    for i in range(0, len(rows), batch_size):
        inserted += await add_knowledge(db, rows[i : i + batch_size])
        print(f"Inserted {inserted} / {len(rows)}")
    return inserted


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Ingest psychoeducation markdown into care_knowledge.")
    parser.add_argument("--dir", type=str, default="knowledge/psychoeducation")
    parser.add_argument("--topic", type=str, default=None)
    parser.add_argument("--lang", choices=sorted(_LANGS), default=None)
    parser.add_argument("--chunk-size", type=int, default=800)
    parser.add_argument("--overlap", type=int, default=120)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    root = Path(args.dir).resolve()
    if not root.is_dir():
        raise SystemExit(f"Directory not found: {root}")

    files = read_markdown_files(root)
    rows = prepare_rows(files, topic=args.topic, lang=args.lang, chunk_size=args.chunk_size, overlap=args.overlap)
    if not rows:
        print("No chunks prepared. Check your --dir/--topic/--lang filters.")
        return
    print(f"Prepared {len(rows)} chunks across {len(files)} files.")

    if args.dry_run:
        print(f"[DRY RUN] First chunk preview: {rows[0]}")
        return

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        asyncio.run(ingest(db, rows))
    finally:
        db.close()
    print("Done.")


if __name__ == "__main__":
    main()
