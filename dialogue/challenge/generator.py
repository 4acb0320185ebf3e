"""Challenge generator: adversarial follow-ups to a scored Turn.

Kind selection is deterministic:
1. Element gaps present -> counter, aimed at the first gap. Each hardness
   has its own pool of counter strategies, rotated by the number of
   counters already issued (hard opens with one compound question over
   the first two gaps)
2. Ambiguous conclusion (conclusion score < 70, or hedging terms in the
   application) -> clarification, unless a clarification was among the last
   two challenges and a hypothetical is still fresh
3. Otherwise -> hypothetical, varying one fact dimension chosen by hardness
   and rotated by the number of earlier challenges

Hardness sets the tone: easy is gentle, medium pointed, hard compound.
Challenges are advisory and never change the Turn or its RubricScore.
"""

from typing import NamedTuple, Sequence

from core.schemas.case import HARDNESS_EASY, HARDNESS_HARD, HARDNESS_MEDIUM, ScoringContext
from core.schemas.challenge import (
    KIND_CLARIFICATION,
    KIND_COUNTER,
    KIND_HYPOTHETICAL,
    Challenge,
)
from core.schemas.results import RubricScore
from core.schemas.turn import Turn

AMBIGUOUS_CONCLUSION_THRESHOLD = 70

# Kinds used this recently are skipped when another kind fits
RECENT_KIND_WINDOW = 2

HEDGE_TERMS = ("可能", "也许", "大概", "似乎", "或许", "应该是")

# Characters of context kept on each side of a quoted hedge
PHRASE_CONTEXT = 10
FACT_PREVIEW = 30


class CounterStrategy(NamedTuple):
    """One way of attacking a gap: prompt template and answering hint."""

    name: str
    template: str
    hint: str


COUNTER_STRATEGIES: dict[str, tuple[CounterStrategy, ...]] = {
    HARDNESS_EASY: (
        CounterStrategy(
            "missing_element",
            '你的分析很有道理，但是否考虑过"{element}"这个要件？在本案中，这个要件似乎也很重要。',
            "提示：回顾法条，思考每个要件在案件中的体现",
        ),
        CounterStrategy(
            "fact_interpretation",
            '关于你引用的事实，是否也可以从另一个角度理解？它们能说明"{element}"已经具备，还是反而支持相反的观点？',
            "提示：事实往往具有多面性，尝试从不同角度解读",
        ),
        CounterStrategy(
            "rule_application",
            '你选择的法条确实相关，但就"{element}"而言，本案是否存在更优先适用的规则？',
            "提示：考虑特别法优于一般法的原则",
        ),
    ),
    HARDNESS_MEDIUM: (
        CounterStrategy(
            "missing_element",
            '你的论证没有处理"{element}"这一要件。缺少这一环，从事实到结论的推理链条还完整吗？',
            "提示：确保每一步推理都有充分的依据",
        ),
        CounterStrategy(
            "logical_gap",
            '你从事实推导到结论时跳过了"{element}"这一中间环节。能否补充说明其中的因果关系？',
            "提示：每一步推理都要能回溯到事实和法条",
        ),
        CounterStrategy(
            "counter_example",
            '如果不论证"{element}"你的结论也能成立，那么在类似情况下是否会导致不合理的结果？请考虑这个反例。',
            "提示：法律追求的是普遍正义，考虑规则的一般适用性",
        ),
        CounterStrategy(
            "evidence_sufficiency",
            '仅凭你引用的事实，是否足以证明"{element}"？还需要哪些证据来加强论证？',
            "提示：考虑举证责任和证明标准",
        ),
    ),
    HARDNESS_HARD: (
        CounterStrategy(
            "element_challenge",
            '即使接受你对事实的解读，这些事实真的满足"{element}"的全部内涵吗？请逐一完成涵摄。',
            "提示：要件该当性需要严格的涵摄过程",
        ),
        CounterStrategy(
            "systematic_conflict",
            '你对"{element}"的理解虽然符合条文的字面含义，但与整个法律体系的价值取向是否一致？请结合立法目的说明。',
            "提示：运用体系解释方法，考虑规范的整体协调性",
        ),
        CounterStrategy(
            "rights_balance",
            '认定"{element}"会影响多方权利。你的结论是否充分平衡了各方利益？有没有考虑比例原则？',
            "提示：法律判断往往需要在相互冲突的利益之间寻找平衡",
        ),
    ),
}

COMPOUND_COUNTER_TEMPLATE = (
    '即使接受你对事实的解读，这些事实真的同时满足"{first}"和"{second}"的全部内涵吗？'
    "两者缺一不可，请分别完成涵摄并说明它们之间的关系。"
)

HEDGE_CLARIFICATION = '你提到"{phrase}"，能否具体解释这与法条要件的对应关系？'
CONCLUSION_CLARIFICATION: dict[str, str] = {
    HARDNESS_EASY: "你的结论还不够明确。可以用一句话说说你的立场吗？",
    HARDNESS_MEDIUM: "你的结论是什么？请用一句话说明你的立场以及支撑它的关键理由。",
    HARDNESS_HARD: "你的结论含糊其辞。请明确立场，并指出它依赖的法条与事实，不要回避相反的可能。",
}
CLARIFICATION_HINT = "提示：结论应当明确、有依据，避免模棱两可的表述"
CONCLUSION_TARGET = "结论"

HYPOTHETICAL_DIMENSIONS: dict[str, tuple[str, ...]] = {
    HARDNESS_EASY: ("时间", "地点"),
    HARDNESS_MEDIUM: ("主体", "行为"),
    HARDNESS_HARD: ("因果关系", "主观要件"),
}

# dimension -> (prompt, analysis hint)
HYPOTHETICAL_TEMPLATES: dict[str, tuple[str, str]] = {
    "时间": (
        "如果本案发生在新法实施之后，考虑到构成要件的调整，你的分析会有何不同？",
        "时间要素可能影响法律适用和时效问题",
    ),
    "地点": (
        "如果本案的行为地发生了变化，管辖和法律适用会受到影响吗？你的结论还成立吗？",
        "地点要素可能影响管辖和准据法的确定",
    ),
    "主体": (
        "假设本案的当事人身份由自然人改变为法人，这对构成要件的认定有何影响？",
        "主体资格可能影响权利能力和行为能力的判断",
    ),
    "行为": (
        "如果当事人的行为换成一种方式相近但性质不同的行为，法律评价会如何改变？",
        "行为方式的细微差异可能导致完全不同的法律定性",
    ),
    "因果关系": (
        "假设存在介入因素打断了因果链条，责任认定将如何变化？",
        "因果关系的认定直接影响责任归属",
    ),
    "主观要件": (
        "如果能证明当事人是过失而非故意，这对案件定性有何决定性影响？",
        "主观要件往往是区分不同法律责任的关键",
    ),
}


def find_hedges(text: str) -> list[str]:
    """Hedging terms present in the text, in HEDGE_TERMS order."""
    return [term for term in HEDGE_TERMS if term in text]


def extract_phrase(text: str, around: str) -> str:
    """A short excerpt of text centred on the first occurrence of `around`."""
    index = text.find(around)
    if index == -1:
        return around
    start = max(0, index - PHRASE_CONTEXT)
    end = min(len(text), index + len(around) + PHRASE_CONTEXT)
    return text[start:end]


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ChallengeGenerator:
    """Render a Challenge from a RubricScore and the session hardness."""

    def generate(
        self,
        score: RubricScore,
        hardness: str,
        turn: Turn,
        ctx: ScoringContext,
        previous_challenges: Sequence[Challenge] = (),
    ) -> Challenge:
        """Generate one follow-up challenge.

        Args:
            score: RubricScore of the Turn
            hardness: Current session hardness
            turn: The evaluated Turn
            ctx: Scoring context (cited fact contents)
            previous_challenges: Challenges already issued in the session

        Returns:
            Challenge (same inputs, same challenge)
        """
        if score.gaps:
            issued = sum(1 for c in previous_challenges if c.kind == KIND_COUNTER)
            return self.counter(score.gaps, hardness, issued)

        hedges = find_hedges(turn.application)
        ambiguous = hedges or score.dims.conclusion.score < AMBIGUOUS_CONCLUSION_THRESHOLD
        if ambiguous and self.select_kind(previous_challenges) == KIND_CLARIFICATION:
            return self.clarification(turn, hedges, hardness)

        return self.hypothetical(hardness, turn, ctx, len(previous_challenges))

    def select_kind(self, previous_challenges: Sequence[Challenge]) -> str:
        """Pick clarification or hypothetical for an ambiguous Turn.

        Clarification is preferred. Kinds issued within the last
        RECENT_KIND_WINDOW challenges are skipped; when both are recent
        clarification is used anyway.
        """
        recent = {c.kind for c in previous_challenges[-RECENT_KIND_WINDOW:]}
        for kind in (KIND_CLARIFICATION, KIND_HYPOTHETICAL):
            if kind not in recent:
                return kind
        return KIND_CLARIFICATION

    def counter(self, gaps: Sequence[str], hardness: str, rotation: int = 0) -> Challenge:
        strategies = COUNTER_STRATEGIES[hardness]
        strategy = strategies[rotation % len(strategies)]
        if hardness == HARDNESS_HARD and strategy is strategies[0] and len(gaps) >= 2:
            prompt = COMPOUND_COUNTER_TEMPLATE.format(first=gaps[0], second=gaps[1])
        else:
            prompt = strategy.template.format(element=gaps[0])
        return Challenge(
            kind=KIND_COUNTER,
            prompt=prompt,
            target_element=gaps[0],
            suggested_response=strategy.hint,
        )

    def clarification(self, turn: Turn, hedges: Sequence[str], hardness: str) -> Challenge:
        if hedges:
            phrase = extract_phrase(turn.application, hedges[0])
            return Challenge(
                kind=KIND_CLARIFICATION,
                prompt=HEDGE_CLARIFICATION.format(phrase=phrase),
                target_element=hedges[0],
                suggested_response=CLARIFICATION_HINT,
            )
        return Challenge(
            kind=KIND_CLARIFICATION,
            prompt=CONCLUSION_CLARIFICATION[hardness],
            target_element=CONCLUSION_TARGET,
            suggested_response=CLARIFICATION_HINT,
        )

    def hypothetical(
        self, hardness: str, turn: Turn, ctx: ScoringContext, rotation: int
    ) -> Challenge:
        dimensions = HYPOTHETICAL_DIMENSIONS[hardness]
        dimension = dimensions[rotation % len(dimensions)]
        prompt, analysis = HYPOTHETICAL_TEMPLATES[dimension]

        facts = ctx.fact_content(turn.cited_facts)
        if facts:
            prompt = f'结合"{truncate(facts[0], FACT_PREVIEW)}"这一事实，' + prompt

        return Challenge(
            kind=KIND_HYPOTHETICAL,
            prompt=prompt,
            target_element=dimension,
            suggested_response=analysis,
        )
