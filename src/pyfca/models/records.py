"""Typed athlete records built from parsed CSV rows."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


NOT_SPECIFIED_POSITION = "Não especificada"
NOT_SPECIFIED_TYPE = "Não especificado"


class _Record(BaseModel):
    id: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Player(_Record):
    nome: str = ""
    posicao: str = NOT_SPECIFIED_POSITION
    data_nascimento: Optional[str] = None
    numero: Optional[int] = None
    idade: Optional[int] = None
    idade_padronizada: Optional[str] = None


class Injury(_Record):
    id_atleta: str = ""
    nome: str = ""
    posicao: str = NOT_SPECIFIED_POSITION
    data: str = ""
    tipo: str = NOT_SPECIFIED_TYPE
    mecanismo: str = ""
    status: Literal["Ativo", "Recuperado"] = "Ativo"
    dias_dm: int = Field(default=0, alias="diasDM")
    regiao: Optional[str] = None
    local: Optional[str] = None
    local2: Optional[str] = None
    lado: Optional[str] = None
    membro: Optional[str] = None
    grau: Optional[str] = None
    lesao_previa: Optional[str] = None


class Evaluation(_Record):
    id_atleta: str = ""
    nome: str = ""
    posicao: str = NOT_SPECIFIED_POSITION
    data: str = ""
    peso: float = 0.0
    altura: float = 0.0
    gordura: float = 0.0
    cmj: float = 0.0
    sj: float = 0.0


class GPSData(_Record):
    id_atleta: str = ""
    nome: str = ""
    posicao: str = NOT_SPECIFIED_POSITION
    data: str = ""
    sessao: str = NOT_SPECIFIED_POSITION
    player_load: float = Field(default=0.0, alias="playerLoad")
    distancia: float = 0.0
    sprints: int = 0


class Statistics(_Record):
    id_atleta: str = ""
    nome: str = ""
    posicao: str = NOT_SPECIFIED_POSITION
    numero: Optional[int] = None
    idade: Optional[int] = None
    jogos: int = 0
    minutos: int = 0
    gols: int = 0
    disponibilidade: Optional[float] = None
    participacao_em_jogos: Optional[float] = None
