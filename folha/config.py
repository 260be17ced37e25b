# folha/config.py
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- Identificação do Ambiente ---
    APP_NAME: str = "Oficina - Motor de Folha"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # --- Folha Mensal ---
    # Divisor de horas para o salário-hora (jornada de 44h semanais)
    HORAS_MES: float = 220.0
    # Mês comercial usado no desconto de faltas
    DIVISOR_DIAS_FALTA: float = 30.0
    # Estimativa de encargos (11% INSS + 8% FGTS)
    PERCENTUAL_ENCARGOS: float = 0.19
    FATOR_HE_SEMANA_PADRAO: float = 1.5
    FATOR_HE_FDS_PADRAO: float = 2.0
    COMISSAO_APENAS_OS_FINALIZADAS: bool = True

    # --- Tabelas INSS / IRRF ---
    TABELA_VIGENTE: str = "2025"
    TAX_TABLES_FILE: Optional[str] = None

    # --- 13º Salário ---
    DIAS_MINIMOS_AVO: int = 15
    JANELA_MEDIAS_MESES: int = 12
    PERIODO_CALCULO_MEDIAS: str = "janela"  # "janela", "meses_trabalhados" ou "12_meses"
    PERCENTUAL_MEDIAS: float = 100.0
    INCLUIR_HORAS_EXTRAS_MEDIA: bool = True
    INCLUIR_COMISSOES_MEDIA: bool = True
    INCLUIR_ADICIONAIS_MEDIA: bool = True
    INCLUIR_BONUS_MEDIA: bool = False

    # --- Armazenamento (coleções iniciais do InMemoryStore) ---
    DATA_FILE: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings():
    return Settings()


# Instância global
settings = get_settings()
