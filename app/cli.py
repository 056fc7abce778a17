"""CLI entrypoint for RefHarvest."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from tqdm import tqdm

from core.config import Config, HarvestSettings
from core.models import SOURCE_KINDS, GatherOptions, PlanOptions, Reference
from llm.agents import LlmAgents
from pipeline.orchestrator import ReferenceHarvester


def _ensure_utf8_console() -> None:
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    os.environ.setdefault("PYTHONUTF8", "1")
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    if hasattr(sys.stderr, "reconfigure"):
        sys.stderr.reconfigure(encoding="utf-8", errors="replace")


def setup_logging(config: Config) -> None:
    cfg = config.get('logging', {}) or {}
    level_name = str(cfg.get('level', 'INFO')).upper()
    fmt = cfg.get('console_format', '%(levelname)s: %(message)s')
    console_level_name = str(cfg.get('min_log_level_console', level_name)).upper()
    file_level_name = str(cfg.get('min_log_level_file', 'DEBUG')).upper()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, console_level_name, logging.INFO))
    console_handler.setFormatter(logging.Formatter(fmt))
    root_logger.addHandler(console_handler)

    output_dir = cfg.get('output_dir')
    if output_dir:
        log_dir = Path(output_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_fmt = cfg.get('file_format', '%(asctime)s - %(levelname)s - %(name)s - %(message)s')
        file_handler = logging.FileHandler(log_dir / 'refharvest.log', encoding='utf-8')
        file_handler.setLevel(getattr(logging, file_level_name, logging.DEBUG))
        file_handler.setFormatter(logging.Formatter(file_fmt))
        root_logger.addHandler(file_handler)

    logging.getLogger('aiohttp').setLevel(logging.WARNING)


def _serialize(results: Dict[str, List[Reference]]) -> Dict[str, List[dict]]:
    return {key: [ref.to_dict() for ref in refs] for key, refs in results.items()}


async def _run(harvester: ReferenceHarvester, args: argparse.Namespace, outline_text: str, opts: GatherOptions, enable_progress: bool) -> Dict[str, List[Reference]]:
    logger = logging.getLogger(__name__)
    if args.section:
        refs = await harvester.gather_for_section(args.title, outline_text, args.section, opts)
        if args.explain:
            refs = list(await asyncio.gather(
                *(harvester.explain_reference(ref, args.title, outline_text) for ref in refs)
            ))
        return {args.section: refs}

    plan_opts = PlanOptions(
        max_per_section=args.max_per_section,
        fixed_per_section=args.fixed_per_section,
    )
    pbar: Optional[tqdm] = tqdm(desc="Sections", unit="section") if enable_progress else None

    def _progress(section_key: str, refs: List[Reference]) -> None:
        if pbar:
            tqdm.write(f"DONE  {section_key}: {len(refs)} references")
            pbar.update(1)
        else:
            logger.info(f"DONE  {section_key}: {len(refs)} references")

    try:
        return await harvester.gather_for_outline(
            args.title,
            outline_text,
            plan_opts=plan_opts,
            opts=opts,
            explain=args.explain,
            progress=_progress,
        )
    finally:
        if pbar:
            pbar.close()


def main() -> None:
    _ensure_utf8_console()
    parser = argparse.ArgumentParser(description='RefHarvest - multi-source reference gathering for outline sections')
    parser.add_argument('title', help='Paper title')
    parser.add_argument('outline', help='Outline text file (one section per line, e.g. "I. Introduction")')
    parser.add_argument('--section', '-s', help='Gather for this section key only')
    parser.add_argument('--need', '-n', type=int, default=5, help='References per section (single-section mode)')
    parser.add_argument('--sources', nargs='+', choices=SOURCE_KINDS, help='Sources to query')
    parser.add_argument('--max-per-section', type=int, default=3, help='Upper bound per section in outline mode')
    parser.add_argument('--fixed-per-section', type=int, help='Skip planning and gather this many for section I')
    parser.add_argument('--topic-lock', action='store_true', help='Restrict results to AI-related works')
    parser.add_argument('--llm-expand', action='store_true', help='Let the LLM add search queries')
    parser.add_argument('--llm-rerank', action='store_true', help='Let the LLM rate relevance of the top candidates')
    parser.add_argument('--explain', action='store_true', help='Ask the LLM to explain each reference')
    parser.add_argument('--config', default='config/default.yaml', help='Config path')
    parser.add_argument('--output', '-o', help='Write JSON here instead of stdout')
    args = parser.parse_args()

    config = Config(args.config)
    setup_logging(config)

    harvester = ReferenceHarvester(HarvestSettings.from_config(config), llm=LlmAgents(config))
    outline_text = Path(args.outline).read_text(encoding='utf-8')
    opts = GatherOptions(
        need=args.need,
        sources=args.sources,
        enable_llm_query_expand=args.llm_expand,
        enable_llm_rerank=args.llm_rerank,
        ai_topic_lock=args.topic_lock,
    )
    enable_progress = bool(config.get('logging', {}).get('enable_progress_bar', True))

    results = asyncio.run(_run(harvester, args, outline_text, opts, enable_progress))
    payload = json.dumps(_serialize(results), ensure_ascii=False, indent=2)
    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(payload, encoding='utf-8')
        logging.getLogger(__name__).info(f"Wrote {sum(len(v) for v in results.values())} references to {out_path}")
    else:
        print(payload)


if __name__ == '__main__':
    main()
