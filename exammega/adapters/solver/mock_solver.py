import random
from exammega.adapters.solver.base import SolverAdapter
from exammega.orchestrator.contracts import SolveResult, Frame, ANSWER_LETTERS

class MockSolver(SolverAdapter):
    def __init__(self, status_store, api_key: str = "", answer: str | None = None):
        self.status = status_store
        self.api_key = api_key
        self.answer = answer

    async def solve(self, frame: Frame) -> SolveResult:
        # Mock: ignore the frame
        answer = self.answer or random.choice(ANSWER_LETTERS)
        self.status.log(f"mock_solver: {answer}")
        return SolveResult(found=True, answer=answer, explanation="Mock answer, no model was called.")
