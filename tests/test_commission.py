# tests/test_commission.py

from decimal import Decimal

from folha.fopag.commission import (
    calc_commission,
    calc_commission_detail,
    orders_in_competence,
)
from builders import criar_cargo, criar_os


def test_cargo_sem_comissao_nao_recebe_nada():
    cargo = criar_cargo(tem_comissao=False)
    ordens = [criar_os(valor_total=50000)]

    assert calc_commission(cargo, ordens, "f1") == Decimal("0")


def test_sem_cargo_nao_recebe_nada():
    assert calc_commission(None, [criar_os()], "f1") == Decimal("0")


def test_base_excedente():
    cargo = criar_cargo(base_calculo_comissao="excedente")

    assert calc_commission(cargo, [criar_os(valor_total=1200)], "f1") == Decimal("20.00")


def test_base_total():
    cargo = criar_cargo(base_calculo_comissao="total")

    assert calc_commission(cargo, [criar_os(valor_total=1200)], "f1") == Decimal("120.00")


def test_excedente_com_meta_zero_equivale_a_total():
    cargo = criar_cargo(base_calculo_comissao="excedente", meta_minima_individual=0)

    assert calc_commission(cargo, [criar_os(valor_total=1200)], "f1") == Decimal("120.00")


def test_meta_nao_atingida():
    cargo = criar_cargo()

    detalhe = calc_commission_detail(cargo, [criar_os(valor_total=800)], "f1")

    assert detalhe.value == Decimal("0")
    assert detalhe.applicable is True
    assert detalhe.threshold_met is False
    assert detalhe.sales_base == Decimal("800")


def test_individual_considera_so_vendas_do_funcionario():
    cargo = criar_cargo(base_calculo_comissao="total", meta_minima_individual=0)
    ordens = [
        criar_os(id="a", valor_total=1000, vendedor_id="f1"),
        criar_os(id="b", valor_total=9000, vendedor_id="f2"),
    ]

    assert calc_commission(cargo, ordens, "f1") == Decimal("100.00")


def test_empresa_considera_todas_as_vendas():
    cargo = criar_cargo(
        tipo_comissao="empresa",
        meta_minima_empresa=5000,
        base_calculo_comissao="excedente",
        percentual_comissao=2,
    )
    ordens = [
        criar_os(id="a", valor_total=4000, vendedor_id="f1"),
        criar_os(id="b", valor_total=6000, vendedor_id="f2"),
    ]

    # (10000 - 5000) * 2%
    assert calc_commission(cargo, ordens, "f9") == Decimal("100.00")


def test_so_os_finalizadas_quando_exigido():
    cargo = criar_cargo(base_calculo_comissao="total", meta_minima_individual=0)
    ordens = [
        criar_os(id="a", valor_total=1000),
        criar_os(id="b", valor_total=500, status="em_andamento"),
    ]

    assert calc_commission(cargo, ordens, "f1", require_finalized_only=True) == Decimal("100.00")
    assert calc_commission(cargo, ordens, "f1", require_finalized_only=False) == Decimal("150.00")


def test_os_da_competencia():
    ordens = [
        criar_os(id="nov", data_conclusao="2025-11-30"),
        criar_os(id="dez", data_conclusao="2025-12-01"),
        criar_os(id="sem_data", data_conclusao=None),
    ]

    selecionadas = orders_in_competence(ordens, "2025-11")

    assert [o.id for o in selecionadas] == ["nov"]
