"""
Relatório de partidas a partir do log do Quake III Arena.

O que este script faz na prática:

- Lê o log bruto do Quake (caminho passado como argumento).
- Manda as linhas pro núcleo (quake_report), que divide em partidas e
  acumula total_kills, players, kills, kills_by_means e ranking.
- Imprime o relatório no terminal (JSON ou texto).
- Opcionalmente exporta JSON e Parquet, e um resumo geral entre partidas.

Formato de saída (fixo, tem gente consumindo isso):

- JSON: {"games": [{"game": 1, "total_kills": ..., "players": [...],
  "kills": {...}, "kills_by_means": {...}, "ranking": ["nome:kills", ...]}]}
- Texto: um bloco {"game_N": {...}} por partida, seguido de "Ranking:".
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pyarrow as pa
import pyarrow.parquet as pq

from quake_report import (
    DEFAULT_QUEUE_SIZE,
    MatchRecord,
    SourceUnavailable,
    process_log,
    read_log_lines,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Parquet com schema explícito: dict vira lista de struct pra não depender de
# inferência (dict vazio ou com chaves diferentes por partida quebra a inferência)
PARQUET_SCHEMA = pa.schema(
    [
        ("game", pa.int64()),
        ("total_kills", pa.int64()),
        ("players", pa.list_(pa.string())),
        ("kills", pa.list_(pa.struct([("player", pa.string()), ("kills", pa.int64())]))),
        ("kills_by_means", pa.list_(pa.struct([("means", pa.string()), ("kills", pa.int64())]))),
        ("ranking", pa.list_(pa.string())),
    ]
)


@dataclass
class ReportConfig:
    log_path: Path
    output_format: str = "json"
    out_dir: Optional[Path] = None
    parquet: bool = False
    summary: bool = False
    encoding: str = "utf-8"
    queue_size: int = DEFAULT_QUEUE_SIZE
    log_level: str = "WARNING"


def build_output_json(records: Sequence[MatchRecord]) -> Dict[str, Any]:
    # Numeração das partidas começa em 1, na ordem em que aparecem no log
    return {"games": [{"game": i, **r.to_dict()} for i, r in enumerate(records, start=1)]}


def render_text(records: Sequence[MatchRecord]) -> str:
    blocks = []
    for i, record in enumerate(records, start=1):
        game = record.to_dict()
        ranking = game.pop("ranking")
        body = json.dumps({f"game_{i}": game}, ensure_ascii=False, indent=3)
        blocks.append(f"{body}\nRanking:\n" + ",\n".join(ranking))
    return "\n".join(blocks)


def render_json(records: Sequence[MatchRecord]) -> str:
    return json.dumps(build_output_json(records), ensure_ascii=False, indent=2)


def write_json(payload: Dict[str, Any], out_path: Path) -> None:
    # Salvo com indentação pra ficar legível e fácil de validar
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def parquet_rows(records: Sequence[MatchRecord]) -> List[Dict[str, Any]]:
    rows = []
    for i, record in enumerate(records, start=1):
        rows.append(
            {
                "game": i,
                "total_kills": record.total_kills,
                "players": list(record.players),
                "kills": [{"player": p, "kills": k} for p, k in record.kills_by_player.items()],
                "kills_by_means": [{"means": m, "kills": k} for m, k in record.kills_by_cause.items()],
                "ranking": list(record.ranking),
            }
        )
    return rows


def write_parquet(records: Sequence[MatchRecord], out_path: Path) -> None:
    # Um único arquivo parquet com todas as partidas desta execução
    out_path.parent.mkdir(parents=True, exist_ok=True)
    table = pa.Table.from_pylist(parquet_rows(records), schema=PARQUET_SCHEMA)
    pq.write_table(table, str(out_path))


def summarize_report(records: Sequence[MatchRecord], top: int = 10) -> Dict[str, Any]:
    # Visão geral somando todas as partidas (o relatório por partida não muda)
    kills_by_player: Counter = Counter()
    kills_by_means: Counter = Counter()
    kills_by_game: Counter = Counter()

    for i, record in enumerate(records, start=1):
        kills_by_game[f"game_{i}"] = record.total_kills
        kills_by_player.update(record.kills_by_player)
        kills_by_means.update(record.kills_by_cause)

    return {
        "games": len(records),
        "total_kills": sum(r.total_kills for r in records),
        "top_killers": kills_by_player.most_common(top),
        "top_means": kills_by_means.most_common(top),
        "games_by_total_kills": kills_by_game.most_common(top),
    }


def render_summary(summary: Dict[str, Any]) -> str:
    lines = [
        "RESUMO GERAL",
        f"- Partidas processadas: {summary['games']}",
        f"- Total de kills: {summary['total_kills']}",
        "",
        "Top jogadores por kills:",
    ]
    lines += [f"  - {name}: {val}" for name, val in summary["top_killers"]]
    lines += ["", "Causas de morte mais frequentes:"]
    lines += [f"  - {name}: {val}" for name, val in summary["top_means"]]
    lines += ["", "Partidas com mais kills:"]
    lines += [f"  - {name}: {val}" for name, val in summary["games_by_total_kills"]]
    return "\n".join(lines)


def parse_args(argv: Optional[Sequence[str]] = None) -> ReportConfig:
    parser = argparse.ArgumentParser(description="Relatório de partidas a partir do log do Quake III Arena")
    parser.add_argument("log_path", type=Path, help="caminho do arquivo de log (ex.: qgames.log)")
    parser.add_argument("--format", dest="output_format", choices=("json", "text"), default="json",
                        help="formato impresso no terminal")
    parser.add_argument("--out", type=Path, default=None, help="pasta onde salvar games.json")
    parser.add_argument("--parquet", action="store_true", help="também salva games.parquet (exige --out)")
    parser.add_argument("--summary", action="store_true", help="imprime um resumo somando todas as partidas")
    parser.add_argument("--encoding", default="utf-8", help="encoding do log")
    parser.add_argument("--queue-size", type=int, default=DEFAULT_QUEUE_SIZE,
                        help="tamanho da fila entre leitura e processamento")
    parser.add_argument("--log-level", default="WARNING",
                        choices=("DEBUG", "INFO", "WARNING", "ERROR"), help="nível de log (stderr)")
    args = parser.parse_args(argv)

    if args.parquet and args.out is None:
        parser.error("--parquet precisa de --out")
    if args.queue_size < 1:
        parser.error("--queue-size precisa ser >= 1")

    return ReportConfig(
        log_path=args.log_path,
        output_format=args.output_format,
        out_dir=args.out,
        parquet=args.parquet,
        summary=args.summary,
        encoding=args.encoding,
        queue_size=args.queue_size,
        log_level=args.log_level,
    )


def run(config: ReportConfig) -> List[MatchRecord]:
    lines = read_log_lines(config.log_path, encoding=config.encoding)
    records = process_log(lines, queue_size=config.queue_size)

    if config.output_format == "text":
        print(render_text(records))
    else:
        print(render_json(records))

    if config.out_dir is not None:
        json_path = config.out_dir / "games.json"
        write_json(build_output_json(records), json_path)
        logger.info("Arquivo gerado: %s", json_path)

        if config.parquet:
            parquet_path = config.out_dir / "games.parquet"
            write_parquet(records, parquet_path)
            logger.info("Arquivo gerado: %s", parquet_path)

    if config.summary:
        print()
        print(render_summary(summarize_report(records)))

    return records


def main(argv: Optional[Sequence[str]] = None) -> int:
    config = parse_args(argv)
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT, stream=sys.stderr)

    try:
        run(config)
    except SourceUnavailable as exc:
        logger.error("%s", exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
