"""
Indicador de avance de la cotización enviada (solo presentación)

submitted (60s) -> review (90s) -> pricing (120s) -> verification -> view

Nada de este módulo modifica quote.status: solo calcula en qué paso
se encuentra el cliente dado el tiempo transcurrido en la etapa.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class StageStep:
    title: str
    description: str


@dataclass(frozen=True)
class Stage:
    name: str
    # segundos hasta redirigir a la etapa siguiente; None = sin redirección automática
    duration: Optional[int]
    # segundo en el que empieza cada paso a partir del segundo
    step_offsets: Tuple[int, ...]
    steps: Tuple[StageStep, ...]
    next_stage: str


STAGES: Dict[str, Stage] = {
    "submitted": Stage(
        "submitted", 60, (),
        (StageStep("견적 접수 완료", "견적 요청이 정상적으로 접수되었습니다"),),
        "review",
    ),
    "review": Stage(
        "review", 90, (20, 45, 70),
        (
            StageStep("기본 정보 확인", "견적 요청 내용을 확인하고 있습니다"),
            StageStep("상세 내용 분석", "요청하신 서비스 내용을 분석하고 있습니다"),
            StageStep("가능성 검토", "요청 사항의 실현 가능성을 검토하고 있습니다"),
            StageStep("검토 완료", "내용 검토가 완료되었습니다"),
        ),
        "pricing",
    ),
    "pricing": Stage(
        "pricing", 120, (25, 50, 75, 100),
        (
            StageStep("기본 요금 조회", "서비스별 기본 요금을 조회하고 있습니다"),
            StageStep("상세 옵션 계산", "요청하신 옵션들의 가격을 계산하고 있습니다"),
            StageStep("시장 가격 비교", "시장 가격과 비교하여 최적 가격을 산정합니다"),
            StageStep("할인 혜택 적용", "가능한 할인 혜택을 적용하고 있습니다"),
            StageStep("최종 가격 산정", "최종 견적 가격이 산정되었습니다"),
        ),
        "verification",
    ),
    "verification": Stage(
        "verification", None, (15, 30, 45, 60),
        (
            StageStep("가격 정확성 검증", "산정된 가격의 정확성을 검증하고 있습니다"),
            StageStep("서비스 내용 확인", "요청하신 서비스 내용을 최종 확인하고 있습니다"),
            StageStep("품질 보증 검토", "서비스 품질과 만족도를 보장하기 위해 검토합니다"),
            StageStep("견적서 작성", "최종 견적서를 작성하고 있습니다"),
            StageStep("검증 완료", "모든 검증이 완료되어 견적서가 준비되었습니다"),
        ),
        "view",
    ),
}


def stage_url(stage: str, quote_id: int) -> str:
    if stage == "view":
        return f"/mypage/quotes/{quote_id}/view"
    return f"/mypage/quotes/{stage}?quoteId={quote_id}"


def current_step(stage: Stage, elapsed: float) -> int:
    """Paso (desde 1) alcanzado a los `elapsed` segundos"""
    return 1 + sum(1 for offset in stage.step_offsets if elapsed >= offset)


def stage_snapshot(stage_name: str, elapsed: float, quote_id: int) -> dict:
    """
    Estado de la etapa a los `elapsed` segundos.
    redirect_due indica que el cliente debe pasar a next_url; el botón de
    "siguiente paso" puede usar next_url en cualquier momento.
    """
    if stage_name not in STAGES:
        raise KeyError(stage_name)
    stage = STAGES[stage_name]
    elapsed = max(0.0, float(elapsed))

    step = current_step(stage, elapsed)
    info = stage.steps[step - 1]
    completed = step >= len(stage.steps) if stage.step_offsets else elapsed >= (stage.duration or 0)

    if stage.duration is None:
        remaining = None
        redirect_due = False
    else:
        remaining = max(0, int(round(stage.duration - elapsed)))
        redirect_due = elapsed >= stage.duration

    return {
        "stage": stage.name,
        "step": step,
        "total_steps": len(stage.steps),
        "step_title": info.title,
        "step_description": info.description,
        "completed": completed,
        "seconds_remaining": remaining,
        "redirect_due": redirect_due,
        "next_stage": stage.next_stage,
        "next_url": stage_url(stage.next_stage, quote_id),
    }


# ========================================================================
# TIMERS
# ========================================================================

@dataclass
class StageTimers:
    """
    Registro de timers de una etapa sobre el loop de asyncio.
    Todo lo que se agenda con schedule() se cancela en cancel_all(), de modo que
    ninguna redirección vieja se dispara después de cambiar de cotización.
    """
    handles: List[asyncio.TimerHandle] = field(default_factory=list)

    def schedule(self, delay: float, callback: Callable, *args) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()

        def disparar():
            # un timer disparado deja de estar pendiente
            if handle in self.handles:
                self.handles.remove(handle)
            callback(*args)

        handle = loop.call_later(delay, disparar)
        self.handles.append(handle)
        return handle

    def schedule_stage(self, stage_name: str, quote_id: int,
                       on_step: Callable[[int], None], on_redirect: Callable[[str], None]) -> None:
        """Agenda los cambios de paso y la redirección final de una etapa"""
        stage = STAGES[stage_name]
        for idx, offset in enumerate(stage.step_offsets, start=2):
            self.schedule(offset, on_step, idx)
        if stage.duration is not None:
            self.schedule(stage.duration, on_redirect, stage_url(stage.next_stage, quote_id))

    @property
    def pending(self) -> int:
        return sum(1 for h in self.handles if not h.cancelled())

    def cancel_all(self) -> None:
        for handle in self.handles:
            handle.cancel()
        self.handles.clear()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.cancel_all()
        return False
