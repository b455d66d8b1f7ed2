import asyncio

import pytest

from conftest import recargar_quote
from services.status_workflow import StageTimers, stage_snapshot


@pytest.mark.parametrize("elapsed, paso", [(0, 1), (19.9, 1), (20, 2), (44, 2), (45, 3), (70, 4), (89, 4)])
def test_pasos_de_revision(elapsed, paso):
    assert stage_snapshot("review", elapsed, 7)["step"] == paso


def test_revision_redirige_a_precios():
    antes = stage_snapshot("review", 89, 7)
    assert antes["redirect_due"] is False
    assert antes["seconds_remaining"] == 1

    snapshot = stage_snapshot("review", 90, 7)
    assert snapshot["redirect_due"] is True
    assert snapshot["seconds_remaining"] == 0
    assert snapshot["next_url"] == "/mypage/quotes/pricing?quoteId=7"


def test_enviada_redirige_a_revision():
    snapshot = stage_snapshot("submitted", 60, 3)
    assert snapshot["redirect_due"] is True
    assert snapshot["completed"] is True
    assert snapshot["next_url"] == "/mypage/quotes/review?quoteId=3"
    assert stage_snapshot("submitted", 10, 3)["completed"] is False


def test_precios_cinco_pasos():
    assert stage_snapshot("pricing", 99, 1)["step"] == 4
    snapshot = stage_snapshot("pricing", 100, 1)
    assert snapshot["step"] == 5
    assert snapshot["step_title"] == "최종 가격 산정"
    assert snapshot["completed"] is True
    assert snapshot["redirect_due"] is False

    assert stage_snapshot("pricing", 120, 1)["next_url"] == "/mypage/quotes/verification?quoteId=1"


def test_verificacion_completa_sin_redireccion():
    snapshot = stage_snapshot("verification", 600, 5)
    assert snapshot["step"] == 5
    assert snapshot["completed"] is True
    assert snapshot["redirect_due"] is False
    assert snapshot["seconds_remaining"] is None
    assert snapshot["next_url"] == "/mypage/quotes/5/view"

    assert stage_snapshot("verification", 59, 5)["completed"] is False


def test_tiempo_negativo_cuenta_como_cero():
    assert stage_snapshot("review", -5, 1)["step"] == 1


def test_etapa_desconocida():
    with pytest.raises(KeyError):
        stage_snapshot("shipping", 0, 1)


# ========== TIMERS ==========

def test_cancel_all_evita_redireccion_vieja():
    disparos = []

    async def escenario():
        timers = StageTimers()
        timers.schedule(0.05, disparos.append, "/mypage/quotes/review?quoteId=1")
        timers.cancel_all()
        await asyncio.sleep(0.1)
        return timers

    timers = asyncio.run(escenario())
    assert disparos == []
    assert timers.handles == []


def test_context_manager_cancela_al_salir():
    disparos = []

    async def escenario():
        async with StageTimers() as timers:
            timers.schedule_stage("review", 9, on_step=disparos.append, on_redirect=disparos.append)
            # 3 pasos + redirección
            assert timers.pending == 4
        await asyncio.sleep(0.05)
        return timers

    timers = asyncio.run(escenario())
    assert timers.pending == 0
    assert disparos == []


def test_timer_se_dispara_si_no_se_cancela():
    disparos = []

    async def escenario():
        timers = StageTimers()
        timers.schedule(0.01, disparos.append, 2)
        timers.schedule(10, disparos.append, 3)
        await asyncio.sleep(0.05)
        pendientes = timers.pending
        timers.cancel_all()
        return pendientes

    pendientes = asyncio.run(escenario())
    assert disparos == [2]
    # el timer ya disparado no cuenta como pendiente
    assert pendientes == 1


# ========== HTTP ==========

def test_api_avance_no_cambia_estado(client, db, guest, guest_headers, make_quote):
    quote = make_quote(guest, status="submitted")

    response = client.get(f"/quotes/{quote.id}/progress/review", params={"elapsed": 50}, headers=guest_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["progress"]["step"] == 3
    assert data["progress"]["next_url"] == f"/mypage/quotes/pricing?quoteId={quote.id}"
    assert data["quote"]["status"] == "submitted"

    assert recargar_quote(db, quote.id).status == "submitted"


def test_api_etapa_inexistente(client, guest, guest_headers, make_quote):
    quote = make_quote(guest)
    response = client.get(f"/quotes/{quote.id}/progress/shipping", headers=guest_headers)
    assert response.status_code == 404
