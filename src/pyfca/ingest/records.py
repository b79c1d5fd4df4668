"""Coerce generic row mappings into typed athlete records per dataset."""

from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union
from uuid import uuid4

from pyfca.config import get_dataset
from pyfca.ingest.csv_pipeline import parse_float, parse_int
from pyfca.models import (
    NOT_SPECIFIED_POSITION,
    NOT_SPECIFIED_TYPE,
    Evaluation,
    GPSData,
    Injury,
    Player,
    Statistics,
)


logger = logging.getLogger(__name__)

AthleteRecord = Union[Player, Injury, Evaluation, GPSData, Statistics]
Row = Mapping[str, Optional[str]]

RECOVERED = "Recuperado"
ACTIVE = "Ativo"


@dataclass(frozen=True)
class CoercionReport:
    """Numeric cells that had content but fell back to their default."""

    dataset: str
    total_records: int
    invalid_numeric_cells: Dict[str, int] = field(default_factory=dict)

    @property
    def invalid_total(self) -> int:
        return sum(self.invalid_numeric_cells.values())


def synthesize_id() -> str:
    return f"{time.time_ns() // 1_000_000}-{uuid4().hex[:8]}"


def _first(row: Row, *keys: str) -> Optional[str]:
    for key in keys:
        value = row.get(key)
        if value:
            return value
    return None


class _Coercer:
    def __init__(self) -> None:
        self.invalid: Counter[str] = Counter()

    def integer(self, row: Row, *keys: str, default: Optional[int] = 0) -> Optional[int]:
        raw = _first(row, *keys)
        if raw is None:
            return default
        value = parse_int(raw)
        if value is None:
            self.invalid[keys[0]] += 1
            return default
        return value

    def number(self, row: Row, *keys: str, default: Optional[float] = 0.0) -> Optional[float]:
        raw = _first(row, *keys)
        if raw is None:
            return default
        value = parse_float(raw)
        if value is None:
            self.invalid[keys[0]] += 1
            return default
        return value


def _athlete_fields(row: Row) -> dict[str, str]:
    return {
        "id": _first(row, "id") or synthesize_id(),
        "id_atleta": _first(row, "id_atleta") or "",
        "nome": _first(row, "nome") or "",
        "posicao": _first(row, "posicao") or NOT_SPECIFIED_POSITION,
    }


def player_from_row(row: Row, coercer: _Coercer) -> Player:
    return Player(
        id=_first(row, "id") or synthesize_id(),
        nome=_first(row, "nome") or "",
        posicao=_first(row, "posicao") or NOT_SPECIFIED_POSITION,
        data_nascimento=row.get("data_nascimento"),
        numero=coercer.integer(row, "numero", default=None),
        idade=coercer.integer(row, "idade", default=None),
        idade_padronizada=row.get("idade_padronizada"),
    )


def injury_from_row(row: Row, coercer: _Coercer) -> Injury:
    # Header-keyed values win; the fixed-column copies only fill blanks.
    return Injury(
        **_athlete_fields(row),
        data=_first(row, "data", "entrada") or "",
        tipo=_first(row, "tipo", "diagnostico_queixa") or NOT_SPECIFIED_TYPE,
        mecanismo=_first(row, "mecanismo", "mecanismo_direto") or "",
        status=RECOVERED if _first(row, "saida") else ACTIVE,
        dias_dm=coercer.integer(row, "dias_dm"),
        regiao=row.get("regiao"),
        local=row.get("local"),
        local2=_first(row, "local2", "local2_direto") or "",
        lado=row.get("lado"),
        membro=row.get("membro"),
        grau=row.get("grau"),
        lesao_previa=row.get("lesao_previa"),
    )


def evaluation_from_row(row: Row, coercer: _Coercer) -> Evaluation:
    fields = _athlete_fields(row)
    fields["nome"] = _first(row, "nome", "atleta") or ""
    return Evaluation(
        **fields,
        data=_first(row, "data") or "",
        peso=coercer.number(row, "peso", "peso_kg"),
        altura=coercer.number(row, "altura", "altura_cm") / 100,
        gordura=coercer.number(row, "gordura", "pct"),
        cmj=coercer.number(row, "cmj"),
        sj=coercer.number(row, "sj"),
    )


def gps_from_row(row: Row, coercer: _Coercer) -> GPSData:
    return GPSData(
        **_athlete_fields(row),
        data=_first(row, "data") or "",
        sessao=_first(row, "sessao") or NOT_SPECIFIED_POSITION,
        player_load=coercer.number(row, "playerload", "player_load"),
        distancia=coercer.number(row, "distancia"),
        sprints=coercer.integer(row, "sprints"),
    )


def statistics_from_row(row: Row, coercer: _Coercer) -> Statistics:
    return Statistics(
        **_athlete_fields(row),
        numero=coercer.integer(row, "numero", default=None),
        idade=coercer.integer(row, "idade", default=None),
        jogos=coercer.integer(row, "jogos"),
        minutos=coercer.integer(row, "minutos", "minutos_jogo", "min_jogados"),
        gols=coercer.integer(row, "gols"),
        disponibilidade=coercer.number(row, "disponibilidade", default=None),
        participacao_em_jogos=coercer.number(row, "participacao_em_jogos", default=None),
    )


_BUILDERS: Dict[str, Callable[[Row, _Coercer], AthleteRecord]] = {
    "players": player_from_row,
    "injuries": injury_from_row,
    "evaluations": evaluation_from_row,
    "gps": gps_from_row,
    "statistics": statistics_from_row,
}


def rows_to_records(
    dataset_type: str,
    rows: Sequence[Row],
) -> tuple[List[AthleteRecord], CoercionReport]:
    """Build typed records for ``dataset_type`` from generic row mappings.

    Malformed numeric cells never fail the batch; they take the field default
    and are counted in the returned report.
    """

    dataset = get_dataset(dataset_type)
    builder = _BUILDERS[dataset.key]
    coercer = _Coercer()
    records = [builder(row, coercer) for row in rows]
    report = CoercionReport(
        dataset=dataset.key,
        total_records=len(records),
        invalid_numeric_cells=dict(coercer.invalid),
    )
    if report.invalid_total:
        logger.warning(
            "%s: %d numeric cells could not be parsed and used defaults (%s)",
            dataset.key,
            report.invalid_total,
            ", ".join(f"{name}={count}" for name, count in sorted(report.invalid_numeric_cells.items())),
        )
    return records, report
