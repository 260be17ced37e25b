# tests/test_router.py

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from folha.api import app
from folha.store import get_store


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


FUNCIONARIO = {"id": "f1", "nome": "Ana", "salario": 3000, "data_inicio": "2020-01-01"}


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_lista_tabelas(client):
    resposta = client.get("/api/v1/fopag/tabelas")

    assert resposta.status_code == 200
    corpo = resposta.json()
    assert set(corpo["inss"]) >= {"2024", "2025"}
    assert corpo["inss"]["2025"]["ceiling"] == pytest.approx(951.63)
    assert corpo["irrf"]["2025"]["brackets"][-1]["upto"] is None


def test_calcular_folha_com_dados_enviados(client):
    resposta = client.post(
        "/api/v1/fopag/calcular",
        json={
            "employee": {**FUNCIONARIO, "data_inicio": "2025-11-20"},
            "competence": "2025-11",
            "inputs": {"bonus": 10},
        },
    )

    assert resposta.status_code == 200
    corpo = resposta.json()
    assert Decimal(corpo["salario_base"]) == Decimal("1100.00")
    assert corpo["dias_trabalhados"] == 11


def test_calcular_folha_sem_competencia_valida(client):
    resposta = client.post(
        "/api/v1/fopag/calcular", json={"employee": FUNCIONARIO, "competence": "11-2025"}
    )

    assert resposta.status_code == 400


def test_calcular_comissao(client):
    resposta = client.post(
        "/api/v1/fopag/comissao",
        json={
            "role": {
                "tem_comissao": True,
                "percentual_comissao": 10,
                "meta_minima_individual": 1000,
                "base_calculo_comissao": "excedente",
            },
            "orders": [
                {"vendedor_id": "f1", "valor_total": 1200, "status": "finalizado", "data_conclusao": "2025-11-10"}
            ],
            "employee_id": "f1",
            "competence": "2025-11",
        },
    )

    assert resposta.status_code == 200
    assert resposta.json()["value"] == pytest.approx(20.0)
    assert resposta.json()["threshold_met"] is True
    assert resposta.json()["valid"] is True


def test_calcular_comissao_percentual_fora_da_faixa(client):
    resposta = client.post(
        "/api/v1/fopag/comissao",
        json={
            "role": {"tem_comissao": True, "percentual_comissao": 150},
            "orders": [{"vendedor_id": "f1", "valor_total": 1200, "status": "finalizado"}],
            "employee_id": "f1",
        },
    )

    corpo = resposta.json()
    assert resposta.status_code == 200
    assert corpo["valid"] is False
    assert corpo["errors"][0]["kind"] == "range_error"


def test_gerar_folha_bloqueada_nao_grava(client, store):
    resposta = client.post(
        "/api/v1/fopag/gerar",
        json={"employee_id": "f3", "competence": "2025-11", "persist": True},
    )

    assert resposta.status_code == 200
    assert resposta.json()["errors"][0]["kind"] == "range_error"
    assert store.list("folhas_pagamento") == []


def test_gerar_folha_do_store(client, store):
    resposta = client.post(
        "/api/v1/fopag/gerar",
        json={"employee_id": "f1", "competence": "2025-11", "persist": True},
    )

    assert resposta.status_code == 200
    assert len(store.list("folhas_pagamento")) == 1


def test_gerar_folha_funcionario_inexistente(client):
    resposta = client.post(
        "/api/v1/fopag/gerar", json={"employee_id": "x", "competence": "2025-11"}
    )

    assert resposta.status_code == 404


def test_gerar_folha_em_lote(client):
    resposta = client.post("/api/v1/fopag/gerar/lote", json={"competence": "2025-11"})

    assert resposta.status_code == 200
    assert resposta.json()["total"] == 2


def test_calcular_folha13(client):
    resposta = client.post(
        "/api/v1/folha13/calcular",
        json={"employee": FUNCIONARIO, "year": 2025, "installment": "parcela_unica"},
    )

    corpo = resposta.json()
    assert resposta.status_code == 200
    assert corpo["valid"] is True
    assert Decimal(corpo["record"]["valor_liquido"]) == Decimal("2722.76")


def test_calcular_folha13_avos_invalidos(client):
    resposta = client.post(
        "/api/v1/folha13/calcular",
        json={
            "employee": FUNCIONARIO,
            "year": 2025,
            "installment": "parcela_unica",
            "edited_twelfths": 13,
        },
    )

    corpo = resposta.json()
    assert resposta.status_code == 200
    assert corpo["valid"] is False
    assert corpo["record"] is None
    assert corpo["errors"][0]["kind"] == "range_error"


def test_validar_folha13(client):
    resposta = client.post(
        "/api/v1/folha13/validar",
        json={
            "record": {
                "funcionario_id": "f1",
                "ano_referencia": 2025,
                "tipo_parcela": "1_parcela",
                "avos_calculados": 12,
                "data_pagamento": "2025-12-10",
            }
        },
    )

    corpo = resposta.json()
    assert corpo["valid"] is True
    assert "30/Nov" in corpo["warnings"][0]["message"]


def test_gerar_folha13_do_store(client, store):
    resposta = client.post(
        "/api/v1/folha13/gerar",
        json={"employee_id": "f1", "year": 2025, "installment": "1_parcela", "persist": True},
    )

    assert resposta.status_code == 200
    assert len(store.list("folha13")) == 1


def test_gerar_folha13_em_lote(client):
    resposta = client.post(
        "/api/v1/folha13/gerar/lote", json={"year": 2025, "installment": "parcela_unica"}
    )

    assert resposta.status_code == 200
    assert resposta.json()["total"] == 3
