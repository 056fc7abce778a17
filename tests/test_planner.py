import unittest

from core.models import PlanOptions
from core.outline import extract_section_text, list_section_keys, section_hint
from pipeline.planner import SectionPlanner, clamp_plan


class FakeLlm:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    async def ask(self, agent_name, prompt):
        self.prompts.append((agent_name, prompt))
        if self.error:
            raise self.error
        return self.reply


ROMAN_OUTLINE = """I. Introduction
  background and motivation
II. Related work
III. Method
  data collection"""

ZH_OUTLINE = """一、緒論
二、文獻探討
三、研究方法"""


class OutlineTest(unittest.TestCase):
    def test_list_section_keys(self):
        self.assertEqual(list_section_keys(ROMAN_OUTLINE), ["I", "II", "III"])
        self.assertEqual(list_section_keys(ZH_OUTLINE), ["一", "二", "三"])
        self.assertEqual(list_section_keys("1. Intro\n2. Body\n1. Intro again"), ["1", "2"])
        self.assertEqual(list_section_keys("no markers here"), [])

    def test_section_hint_for_zh_marker(self):
        self.assertEqual(section_hint(ZH_OUTLINE, "二"), "文獻探討")

    def test_loose_key_match_keeps_whole_heading(self):
        outline = "Introduction to tutoring systems\nMethods"
        self.assertEqual(section_hint(outline, "Intro"), "Introduction to tutoring systems")
        self.assertEqual(section_hint("Methods\nMethod. Survey design", "Method"), "Survey design")

    def test_extract_section_text_stops_at_next_header(self):
        self.assertEqual(extract_section_text(ROMAN_OUTLINE, "I"), "I. Introduction\n  background and motivation")
        self.assertEqual(extract_section_text(ROMAN_OUTLINE, "III"), "III. Method\n  data collection")
        self.assertEqual(extract_section_text(ROMAN_OUTLINE, "IV"), "")


class ClampPlanTest(unittest.TestCase):
    def test_clamps_into_range(self):
        self.assertEqual(clamp_plan({"I": 9, "II": 0, "III": "2", "IV": "x"}, 3), {"I": 3, "II": 1, "III": 2, "IV": 1})

    def test_empty_plan_becomes_single_section(self):
        self.assertEqual(clamp_plan({}, 3), {"I": 1})
        self.assertEqual(clamp_plan({"  ": 2}, 3), {"I": 1})


class SectionPlannerTest(unittest.IsolatedAsyncioTestCase):
    async def test_custom_plan_wins(self):
        llm = FakeLlm('{"I": 1}')
        plan = await SectionPlanner(llm).plan(ROMAN_OUTLINE, PlanOptions(max_per_section=2, fixed_per_section=4, custom_plan={"II": 5}))
        self.assertEqual(plan, {"II": 2})
        self.assertEqual(llm.prompts, [])

    async def test_fixed_per_section(self):
        plan = await SectionPlanner(FakeLlm('{"I": 1}')).plan(ROMAN_OUTLINE, PlanOptions(max_per_section=3, fixed_per_section=2))
        self.assertEqual(plan, {"I": 2})

    async def test_llm_plan_is_clamped(self):
        llm = FakeLlm('```json\n{"I": 4, "II": 1.6, "III": 0}\n```')
        plan = await SectionPlanner(llm).plan(ROMAN_OUTLINE, PlanOptions(max_per_section=3))
        self.assertEqual(plan, {"I": 3, "II": 1, "III": 1})
        self.assertEqual(llm.prompts[0][0], "section_planner")
        self.assertIn("III. Method", llm.prompts[0][1])

    async def test_llm_failure_uses_detected_sections(self):
        for llm in (FakeLlm(error=RuntimeError("down")), FakeLlm('["I", "II"]'), FakeLlm("{}")):
            plan = await SectionPlanner(llm).plan(ROMAN_OUTLINE, PlanOptions(max_per_section=3))
            self.assertEqual(plan, {"I": 2, "II": 2, "III": 2})

    async def test_unusable_llm_counts_use_detected_sections(self):
        outline = "I. Intro\nII. Body"
        for reply in ('{"I": 1' + '0' * 400 + '}', '{"I": NaN, "II": 1}', '{' * 5000):
            plan = await SectionPlanner(FakeLlm(reply)).plan(outline, PlanOptions(max_per_section=3))
            self.assertEqual(plan, {"I": 2, "II": 2}, reply[:20])

    def test_clamp_plan_tolerates_oversized_counts(self):
        self.assertEqual(clamp_plan({"I": 10 ** 400}, 3), {"I": 1})
        self.assertEqual(clamp_plan({"I": float("inf")}, 3), {"I": 1})

    async def test_fallback_respects_cap(self):
        plan = await SectionPlanner().plan(ZH_OUTLINE, PlanOptions(max_per_section=1))
        self.assertEqual(plan, {"一": 1, "二": 1, "三": 1})

    async def test_fallback_without_markers(self):
        self.assertEqual(await SectionPlanner().plan("just a paragraph"), {"I": 2})


if __name__ == '__main__':
    unittest.main()
