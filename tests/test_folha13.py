# tests/test_folha13.py

from decimal import Decimal

import pytest

from folha.folha13.calculator import calc_folha13, mark_edited
from folha.models import StatusFolha13, TipoParcela
from folha.shared.errors import InputError, IssueKind
from builders import criar_folha, criar_funcionario


def test_parcela_unica_tabela_2025(config):
    # Arrange
    funcionario = criar_funcionario(salario=3000)
    # Act
    resultado = calc_folha13(funcionario, 2025, "parcela_unica", config=config)
    registro = resultado.record
    # Assert
    assert resultado.errors == []
    assert registro.accrued_twelfths == 12
    assert registro.gross_value == Decimal("3000.00")
    assert registro.inss_value == Decimal("253.41")
    assert registro.irrf_base == Decimal("2746.59")
    assert registro.irrf_value == Decimal("23.83")
    assert registro.net_value == Decimal("2722.76")
    assert registro.net_value == registro.gross_value - registro.inss_value - registro.irrf_value
    assert registro.status == StatusFolha13.GERADO
    assert registro.table_version == "2025"


def test_parcela_unica_tabela_2024(config):
    resultado = calc_folha13(
        criar_funcionario(), 2024, "parcela_unica", table_version="2024", config=config
    )

    assert resultado.record.inss_value == Decimal("258.82")
    assert resultado.record.irrf_value == Decimal("36.15")
    assert resultado.record.net_value == Decimal("2705.03")


def test_primeira_parcela_sem_impostos(config):
    resultado = calc_folha13(criar_funcionario(salario=3333.33), 2025, "1_parcela", config=config)
    registro = resultado.record

    assert registro.installment_type == TipoParcela.PRIMEIRA
    assert registro.inss_value == Decimal("0")
    assert registro.irrf_value == Decimal("0")
    assert registro.inss_bracket == "N/A"
    assert registro.net_value == registro.first_installment_value
    assert registro.gross_value == Decimal("3333.33")
    assert registro.net_value == Decimal("1666.67")


def test_segunda_parcela_impostos_sobre_o_bruto_cheio(config):
    resultado = calc_folha13(criar_funcionario(), 2025, "2_parcela", config=config)
    registro = resultado.record

    assert registro.first_installment_value == Decimal("1500.00")
    assert registro.inss_value == Decimal("253.41")
    assert registro.net_value == Decimal("1222.76")


def test_liquido_negativo_e_travado_em_zero_com_aviso(config):
    resultado = calc_folha13(
        criar_funcionario(), 2025, "parcela_unica", other_deductions=5000, config=config
    )

    assert resultado.record.net_value == Decimal("0")
    assert resultado.record.net_before_floor < 0
    assert any("negativo" in str(w) for w in resultado.warnings)
    assert resultado.errors == []


def test_avos_editados_fora_da_faixa_sao_rejeitados(config):
    resultado = calc_folha13(
        criar_funcionario(), 2025, "parcela_unica", edited_twelfths=13, config=config
    )

    assert resultado.record is None
    assert resultado.errors[0].kind == IssueKind.RANGE_ERROR


@pytest.mark.parametrize("avos", [-1, 6.5, "abc", True])
def test_avos_editados_invalidos(avos, config):
    resultado = calc_folha13(
        criar_funcionario(), 2025, "1_parcela", edited_twelfths=avos, config=config
    )

    assert resultado.record is None
    assert resultado.errors


def test_avos_editados_recalculam_o_bruto(config):
    resultado = calc_folha13(
        criar_funcionario(), 2025, "1_parcela", edited_twelfths="6", config=config
    )

    assert resultado.record.edited_twelfths == 6
    assert resultado.record.effective_twelfths == 6
    assert resultado.record.gross_value == Decimal("1500.00")


def test_avos_editados_iguais_aos_calculados_nao_contam_como_edicao(config):
    resultado = calc_folha13(
        criar_funcionario(), 2025, "1_parcela", edited_twelfths=12, config=config
    )

    assert resultado.record.edited_twelfths is None
    assert mark_edited(resultado.record).status == StatusFolha13.GERADO


def test_marcar_como_editado(config):
    editado = calc_folha13(
        criar_funcionario(), 2025, "1_parcela", edited_twelfths=10, config=config
    ).record
    com_desconto = calc_folha13(
        criar_funcionario(), 2025, "parcela_unica", other_deductions=10, config=config
    ).record

    assert mark_edited(editado).status == StatusFolha13.EDITADO
    assert mark_edited(com_desconto).status == StatusFolha13.EDITADO


def test_tabela_inexistente_usa_a_mais_recente_com_aviso(config):
    resultado = calc_folha13(
        criar_funcionario(), 2025, "parcela_unica", table_version="1999", config=config
    )

    assert resultado.record.table_version == "2025"
    assert resultado.record.inss_value == Decimal("253.41")
    fallbacks = [w for w in resultado.warnings if w.kind == IssueKind.CONFIG_FALLBACK]
    assert len(fallbacks) == 2


def test_sem_avos_gera_registro_zerado(config):
    resultado = calc_folha13(
        criar_funcionario(data_inicio="2026-01-10"), 2025, "parcela_unica", config=config
    )

    assert resultado.record.gross_value == Decimal("0")
    assert resultado.record.net_value == Decimal("0")
    assert any("Nenhum avo" in str(w) for w in resultado.warnings)


def test_medias_entram_no_bruto(config):
    folhas = [criar_folha(competencia="2025-12", horas_extras=1200)]

    resultado = calc_folha13(
        criar_funcionario(), 2025, "1_parcela", payrolls=folhas, config=config
    )

    assert resultado.record.average_overtime == Decimal("100.00")
    assert resultado.record.gross_value == Decimal("3100.00")


def test_dependentes_reduzem_base_do_irrf(config):
    funcionario = criar_funcionario(dependentes_irrf=2)

    registro = calc_folha13(funcionario, 2025, "parcela_unica", config=config).record

    assert registro.irrf_dependents == 2
    assert registro.irrf_dependent_deduction == Decimal("379.18")
    assert registro.irrf_value == Decimal("0")


def test_tipo_de_parcela_invalido(config):
    resultado = calc_folha13(criar_funcionario(), 2025, "3_parcela", config=config)

    assert resultado.record is None
    assert resultado.errors


def test_identificadores_obrigatorios(config):
    with pytest.raises(InputError):
        calc_folha13(None, 2025, "1_parcela", config=config)
    with pytest.raises(InputError):
        calc_folha13(criar_funcionario(), None, "1_parcela", config=config)


def test_mesmas_entradas_mesmo_resultado(config):
    primeiro = calc_folha13(criar_funcionario(), 2025, "2_parcela", config=config)
    segundo = calc_folha13(criar_funcionario(), 2025, "2_parcela", config=config)

    assert primeiro.record == segundo.record
