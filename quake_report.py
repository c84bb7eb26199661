"""
Núcleo do relatório de partidas do Quake III Arena.

O que este módulo faz na prática:

- Classifica cada linha do log em um tipo de evento (InitGame, ShutdownGame,
  ClientUserinfoChanged, Kill ou nada).
- Segmenta o fluxo de linhas em partidas com uma máquina de estados simples.
- Acumula, por partida: total_kills, players, kills por jogador e kills por causa.
- Fecha cada partida em um MatchRecord imutável com o ranking já calculado.
- Roda leitura e processamento em duas etapas (produtor/consumidor) ligadas
  por uma fila limitada.

Decisões tomadas:

- "<world>" não pontua pra ninguém: a vítima perde 1 ponto, mas nunca fica negativa.
- Partida sem ShutdownGame no fim do arquivo é descartada (não faço flush no fim).
- InitGame repetido sem nenhum jogador registrado não gera partida vazia.
"""

from __future__ import annotations

import logging
import queue
import re
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, TextIO, Tuple, Union

logger = logging.getLogger(__name__)


WORLD_NAME = "<world>"

MATCH_START_MARKER = "InitGame"
MATCH_END_MARKER = "ShutdownGame"
PLAYER_MARKER = "ClientUserinfoChanged"
KILL_MARKER = "Kill"

DEFAULT_QUEUE_SIZE = 100

# Primeira ocorrência de " killed " e de " by ", lendo da esquerda pra direita
KILL_PATTERN = re.compile(r"^(.*?) killed (.*?) by (.*)$")


class LogReportError(Exception):
    """Erro base do processamento do log."""


class SourceUnavailable(LogReportError):
    """O log não pôde ser aberto ou lido. Aborta o processamento."""


class MalformedKillEvent(LogReportError, ValueError):
    """Linha de Kill que não segue '<killer> killed <killed> by <cause>'."""


class MalformedRegistrationEvent(LogReportError, ValueError):
    """Linha de ClientUserinfoChanged sem o delimitador '\\'."""


class EventKind(Enum):
    MATCH_START = "match_start"
    MATCH_END = "match_end"
    PLAYER_REGISTERED = "player_registered"
    KILL_RECORDED = "kill_recorded"
    UNRECOGNIZED = "unrecognized"


# Ordem fixa: um nome de jogador com "Kill" não pode transformar um
# ClientUserinfoChanged em evento de kill
_MARKERS: Tuple[Tuple[str, EventKind], ...] = (
    (MATCH_START_MARKER, EventKind.MATCH_START),
    (MATCH_END_MARKER, EventKind.MATCH_END),
    (PLAYER_MARKER, EventKind.PLAYER_REGISTERED),
    (KILL_MARKER, EventKind.KILL_RECORDED),
)


def classify_line(line: str) -> EventKind:
    for marker, kind in _MARKERS:
        if marker in line:
            return kind
    return EventKind.UNRECOGNIZED


@dataclass
class MatchState:
    total_kills: int = 0
    players: List[str] = field(default_factory=list)
    kills_by_player: Dict[str, int] = field(default_factory=dict)
    kills_by_cause: Dict[str, int] = field(default_factory=dict)

    @property
    def has_players(self) -> bool:
        return bool(self.players)


@dataclass(frozen=True)
class MatchRecord:
    """Foto imutável de uma partida já encerrada."""

    total_kills: int
    players: Tuple[str, ...]
    kills_by_player: Mapping[str, int]
    kills_by_cause: Mapping[str, int]
    ranking: Tuple[str, ...]

    def to_dict(self) -> Dict[str, object]:
        # Essas chaves são o formato de saída consumido por fora, não renomear
        return {
            "total_kills": self.total_kills,
            "players": list(self.players),
            "kills": dict(self.kills_by_player),
            "kills_by_means": dict(self.kills_by_cause),
            "ranking": list(self.ranking),
        }


def parse_player_name(line: str) -> str:
    # O nome é o valor logo depois da primeira barra: "... n\Isgalamido\t\0..."
    fields = line.split("\\")
    if len(fields) < 2:
        raise MalformedRegistrationEvent(f"ClientUserinfoChanged sem nome: {line.strip()}")
    return fields[1]


def parse_kill_parties(line: str) -> Tuple[str, str, str]:
    """
    Extrai (killer, killed, cause) de uma linha de Kill.

    Só olho o trecho depois do último ':'; os ids numéricos antes disso não
    interessam aqui. Nomes podem conter "killed" ou "by", por isso o regex
    pega sempre a primeira ocorrência dos separadores.
    """
    payload = line.split(":")[-1].strip()
    match = KILL_PATTERN.match(payload)
    if not match:
        raise MalformedKillEvent(f"Linha de Kill fora do padrão esperado: {line.strip()}")

    killer, killed, cause = (part.strip() for part in match.groups())
    return killer, killed, cause


def register_player(state: MatchState, line: str) -> None:
    name = parse_player_name(line)

    # Registro repetido (reconexão, troca de modelo) não mexe em nada
    if name in state.kills_by_player:
        return

    state.players.append(name)
    state.kills_by_player[name] = 0


def record_kill(state: MatchState, line: str) -> None:
    # Parseio antes de mexer no estado: linha ruim não pode contar pela metade
    killer, killed, cause = parse_kill_parties(line)

    state.total_kills += 1

    if killer != WORLD_NAME:
        # Pode acontecer de o killer nunca ter aparecido num ClientUserinfoChanged
        state.kills_by_player[killer] = state.kills_by_player.get(killer, 0) + 1
    elif state.kills_by_player.get(killed, 0) > 0:
        state.kills_by_player[killed] -= 1

    state.kills_by_cause[cause] = state.kills_by_cause.get(cause, 0) + 1


def build_ranking(kills_by_player: Mapping[str, int]) -> List[str]:
    # sorted é estável; empate fica na ordem em que o dict enumera (não garanto nada além disso)
    ordered = sorted(kills_by_player.items(), key=lambda kv: kv[1], reverse=True)
    return [f"{name}:{count}" for name, count in ordered]


def finalize_match(state: MatchState) -> MatchRecord:
    return MatchRecord(
        total_kills=state.total_kills,
        players=tuple(state.players),
        kills_by_player=MappingProxyType(dict(state.kills_by_player)),
        kills_by_cause=MappingProxyType(dict(state.kills_by_cause)),
        ranking=tuple(build_ranking(state.kills_by_player)),
    )


class MatchSegmenter:
    """
    Máquina de estados que recorta o log em partidas.

    Estados: sem partida aberta (state is None) ou partida aberta. Cada
    chamada de feed() recebe uma linha e devolve o MatchRecord fechado por
    ela, se houver.
    """

    def __init__(self) -> None:
        self.state: Optional[MatchState] = None
        self.malformed_lines = 0

    @property
    def match_open(self) -> bool:
        return self.state is not None

    def feed(self, line: str) -> Optional[MatchRecord]:
        kind = classify_line(line)

        if kind is EventKind.MATCH_START:
            return self._start_match()

        if kind is EventKind.MATCH_END:
            return self._end_match()

        if self.state is None or kind is EventKind.UNRECOGNIZED:
            return None

        try:
            if kind is EventKind.PLAYER_REGISTERED:
                register_player(self.state, line)
            else:
                record_kill(self.state, line)
        except ValueError as exc:
            self.malformed_lines += 1
            logger.warning("Ignorando evento mal formado: %s", exc)

        return None

    def close(self) -> None:
        # Fim do log sem ShutdownGame: a partida aberta é descartada de propósito
        if self.state is not None:
            logger.debug(
                "Log terminou com partida aberta (%d jogadores, %d kills); descartada",
                len(self.state.players),
                self.state.total_kills,
            )
        self.state = None

    def _start_match(self) -> Optional[MatchRecord]:
        record = None
        if self.state is not None:
            if self.state.has_players:
                record = finalize_match(self.state)
            else:
                logger.debug("InitGame sem jogadores antes do próximo InitGame; partida vazia ignorada")
        self.state = MatchState()
        return record

    def _end_match(self) -> Optional[MatchRecord]:
        if self.state is None:
            return None
        record = finalize_match(self.state)
        self.state = None
        return record


def segment_matches(lines: Iterable[str]) -> Iterator[MatchRecord]:
    """Versão síncrona: consome as linhas e vai devolvendo as partidas fechadas."""
    segmenter = MatchSegmenter()
    for line in lines:
        record = segmenter.feed(line)
        if record is not None:
            yield record
    segmenter.close()


def read_log_lines(path: Union[str, Path], encoding: str = "utf-8") -> Iterator[str]:
    """
    Lê o log linha a linha, sem carregar o arquivo inteiro.

    O arquivo é aberto já na chamada (não na primeira iteração), então um
    caminho inválido levanta SourceUnavailable antes de qualquer processamento.
    """
    try:
        handle = Path(path).open("r", encoding=encoding)
    except OSError as exc:
        raise SourceUnavailable(f"Não consegui abrir o log {path}: {exc}") from exc
    return _iter_lines(handle, path)


def _iter_lines(handle: TextIO, path: Union[str, Path]) -> Iterator[str]:
    with handle:
        try:
            for raw_line in handle:
                yield raw_line.rstrip("\r\n")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceUnavailable(f"Falha lendo o log {path}: {exc}") from exc


# Marca de fim da fila (o produtor fecha, o consumidor drena até achar isso)
_END_OF_STREAM = object()


class LinePipeline:
    """
    Produtor/consumidor: uma thread lê as linhas e enfileira, a thread que
    chamou run() tira da fila e alimenta o MatchSegmenter.

    A fila é limitada, então o produtor espera quando ela enche. Se a leitura
    falhar, o erro é guardado e levantado de novo no run() depois que a fila
    for drenada; nesse caso nenhum relatório parcial é devolvido.
    """

    def __init__(
        self,
        lines: Iterable[str],
        queue_size: int = DEFAULT_QUEUE_SIZE,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        if queue_size < 1:
            raise ValueError("queue_size precisa ser >= 1")
        self.lines = lines
        self.line_queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self.stop_event = stop_event or threading.Event()
        self._error: Optional[BaseException] = None

    def _produce(self) -> None:
        try:
            for line in self.lines:
                if self.stop_event.is_set():
                    logger.debug("Leitura interrompida antes do fim do log")
                    break
                self.line_queue.put(line)
        except Exception as exc:
            self._error = exc
        finally:
            self.line_queue.put(_END_OF_STREAM)

    def run(self) -> List[MatchRecord]:
        producer = threading.Thread(target=self._produce, name="log-reader", daemon=True)
        producer.start()

        segmenter = MatchSegmenter()
        report: List[MatchRecord] = []
        while True:
            line = self.line_queue.get()
            if line is _END_OF_STREAM:
                break
            record = segmenter.feed(line)
            if record is not None:
                report.append(record)
        segmenter.close()
        producer.join()

        if self._error is not None:
            raise self._error

        logger.info(
            "Processamento concluído: %d partidas, %d eventos mal formados",
            len(report),
            segmenter.malformed_lines,
        )
        return report


def process_log(
    lines: Iterable[str],
    queue_size: int = DEFAULT_QUEUE_SIZE,
    stop_event: Optional[threading.Event] = None,
) -> List[MatchRecord]:
    return LinePipeline(lines, queue_size=queue_size, stop_event=stop_event).run()


def process_log_file(
    path: Union[str, Path],
    encoding: str = "utf-8",
    queue_size: int = DEFAULT_QUEUE_SIZE,
) -> List[MatchRecord]:
    return process_log(read_log_lines(path, encoding=encoding), queue_size=queue_size)
