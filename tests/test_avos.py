# tests/test_avos.py

from folha.folha13.avos import calc_avos
from builders import criar_afastamento, criar_funcionario, criar_ponto


def test_ano_completo_tem_12_avos():
    resultado = calc_avos(criar_funcionario(), 2025)

    assert resultado.accrued == 12
    assert resultado.lost_to_absence == 0
    assert resultado.lost_to_leave == 0
    assert set(resultado.details) == {str(m) for m in range(1, 13)}


def test_admissao_com_15_dias_ou_mais_conta_o_mes():
    # 10/03 a 31/03 = 22 dias
    resultado = calc_avos(criar_funcionario(data_inicio="2025-03-10"), 2025)

    assert resultado.accrued == 10
    assert resultado.details["2"]["trabalhado"] is False


def test_admissao_com_menos_de_15_dias_nao_conta_nem_desconta():
    # 20/03 a 31/03 = 12 dias
    resultado = calc_avos(criar_funcionario(data_inicio="2025-03-20"), 2025)

    assert resultado.accrued == 9
    assert resultado.lost_to_absence == 0
    assert resultado.lost_to_leave == 0


def test_admitido_depois_do_ano_de_referencia():
    resultado = calc_avos(criar_funcionario(data_inicio="2026-02-01"), 2025)

    assert resultado.accrued == 0
    assert "não trabalhava" in str(resultado.warnings[0])


def test_desligamento_no_meio_do_ano():
    # Junho: 1 a 10 = 10 dias, não gera avo
    resultado = calc_avos(criar_funcionario(data_demissao="2025-06-10"), 2025)

    assert resultado.accrued == 5


def test_faltas_reduzem_avo():
    ponto = [criar_ponto(mes_referencia="2025-04", faltas_dias=20)]

    resultado = calc_avos(criar_funcionario(), 2025, attendance=ponto)

    assert resultado.accrued == 11
    assert resultado.lost_to_absence == 1
    assert any("Mês 4" in str(w) for w in resultado.warnings)


def test_poucas_faltas_nao_reduzem_avo():
    ponto = [criar_ponto(mes_referencia="2025-04", faltas_dias=5)]

    resultado = calc_avos(criar_funcionario(), 2025, attendance=ponto)

    assert resultado.accrued == 12


def test_afastamento_reduz_avo():
    resultado = calc_avos(criar_funcionario(), 2025, leaves=[criar_afastamento()])

    assert resultado.accrued == 11
    assert resultado.lost_to_leave == 1
    assert resultado.details["2"]["dias_afastamento"] == 28


def test_afastamento_sem_data_fim_segue_ate_o_fim_do_ano():
    afastamento = criar_afastamento(data_inicio="2025-11-01", data_fim=None)

    resultado = calc_avos(criar_funcionario(), 2025, leaves=[afastamento])

    assert resultado.accrued == 10
    assert resultado.lost_to_leave == 2


def test_afastamento_de_outro_funcionario_e_ignorado():
    afastamento = criar_afastamento(funcionario_id="f2")

    resultado = calc_avos(criar_funcionario(), 2025, leaves=[afastamento])

    assert resultado.accrued == 12
