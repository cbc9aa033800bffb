from __future__ import annotations

import dataclasses
import typing as t

JsonDict = dict[str, t.Any]

DEFAULT_PASSING_SCORE = 60


class CatalogError(ValueError):
    pass


@dataclasses.dataclass(frozen=True)
class Subject:
    id: int
    name: str
    description: str
    topics: list[str]

    def to_dict(self) -> JsonDict:
        return {"id": self.id, "name": self.name}


@dataclasses.dataclass(frozen=True)
class DifficultyTier:
    id: str
    name: str
    description: str
    minutes_per_question: int
    passing_score: int

    def to_dict(self) -> JsonDict:
        return {
            "id": self.id,
            "name": self.name,
            "timePerQuestion": f"{self.minutes_per_question} minutes",
            "passingScore": self.passing_score,
        }


@dataclasses.dataclass(frozen=True)
class QuestionCountOption:
    value: int
    label: str
    duration: str
    pace: str

    def to_dict(self) -> JsonDict:
        return {"value": self.value, "label": self.label}


SUBJECTS: list[Subject] = [
    Subject(1, "Data Structures & Algorithms", "Arrays, trees, graphs and algorithmic thinking", ["Arrays", "Linked Lists", "Trees", "Graphs", "Sorting", "Dynamic Programming"]),
    Subject(2, "Object-Oriented Programming", "Classes, inheritance and design principles", ["Classes", "Inheritance", "Polymorphism", "Encapsulation", "SOLID"]),
    Subject(3, "Database Management Systems", "Relational models, SQL and transactions", ["SQL", "Normalization", "Indexing", "Transactions", "ER Models"]),
    Subject(4, "Computer Networks", "Protocols, layers and network design", ["OSI Model", "TCP/IP", "Routing", "DNS", "HTTP"]),
    Subject(5, "Operating Systems", "Processes, memory and file systems", ["Processes", "Scheduling", "Memory Management", "Deadlocks", "File Systems"]),
    Subject(6, "Web Development", "Frontend, backend and web standards", ["HTML", "CSS", "JavaScript", "REST APIs", "Security"]),
    Subject(7, "Software Engineering", "Lifecycle models, requirements and quality", ["SDLC", "Agile", "Requirements", "Design Patterns", "Maintenance"]),
    Subject(8, "Machine Learning", "Supervised, unsupervised and model evaluation", ["Regression", "Classification", "Clustering", "Neural Networks", "Evaluation"]),
    Subject(9, "Cybersecurity", "Threats, cryptography and secure systems", ["Cryptography", "Network Security", "Malware", "Authentication", "OWASP"]),
    Subject(10, "Mobile App Development", "Native and cross-platform mobile apps", ["Android", "iOS", "React Native", "Flutter", "App Lifecycle"]),
    Subject(11, "Cloud Computing", "Service models, virtualization and scaling", ["IaaS", "PaaS", "SaaS", "Virtualization", "Containers"]),
    Subject(12, "DevOps", "CI/CD, automation and infrastructure", ["CI/CD", "Docker", "Kubernetes", "Monitoring", "Infrastructure as Code"]),
    Subject(13, "Discrete Mathematics", "Logic, sets, combinatorics and graphs", ["Logic", "Sets", "Relations", "Combinatorics", "Graph Theory"]),
    Subject(14, "Computer Architecture", "Processor design, memory hierarchy and I/O", ["Instruction Sets", "Pipelining", "Caches", "Memory Hierarchy", "I/O"]),
    Subject(15, "Compiler Design", "Lexing, parsing and code generation", ["Lexical Analysis", "Parsing", "Semantic Analysis", "Optimization", "Code Generation"]),
    Subject(16, "Digital Logic Design", "Gates, circuits and sequential logic", ["Boolean Algebra", "Logic Gates", "Combinational Circuits", "Flip-Flops", "Counters"]),
    Subject(17, "System Design", "Scalable architectures and trade-offs", ["Scalability", "Load Balancing", "Caching", "Databases", "Microservices"]),
    Subject(18, "Artificial Intelligence", "Search, reasoning and intelligent agents", ["Search", "Knowledge Representation", "Planning", "NLP", "Agents"]),
    Subject(19, "Linux/Unix Systems", "Shell, permissions and system administration", ["Shell Commands", "Permissions", "Processes", "Scripting", "Networking"]),
    Subject(20, "Software Testing", "Test design, automation and quality assurance", ["Unit Testing", "Integration Testing", "Test Automation", "TDD", "Bug Tracking"]),
    Subject(21, "Aptitude & Reasoning", "Quantitative and logical reasoning", ["Arithmetic", "Logical Reasoning", "Puzzles", "Data Interpretation", "Verbal Ability"]),
    Subject(22, "Interview Preparation", "Technical and behavioural interview practice", ["Coding Interviews", "System Design Interviews", "Behavioural Questions", "Resume", "Mock Interviews"]),
    Subject(23, "Communication Skills", "Written, verbal and professional communication", ["Verbal Communication", "Writing", "Presentation", "Listening", "Teamwork"]),
    Subject(24, "Project Management", "Planning, execution and delivery", ["Planning", "Scheduling", "Risk Management", "Agile", "Stakeholders"]),
]

DIFFICULTY_LEVELS: list[DifficultyTier] = [
    DifficultyTier("beginner", "Beginner", "Foundation concepts and basic understanding", 2, 60),
    DifficultyTier("intermediate", "Intermediate", "Applied knowledge and problem solving", 3, 70),
    DifficultyTier("advanced", "Advanced", "Complex scenarios and expert level concepts", 4, 80),
]

QUESTION_COUNTS: list[QuestionCountOption] = [
    QuestionCountOption(10, "10 Questions", "20-30 min", "Quick"),
    QuestionCountOption(20, "20 Questions", "40-60 min", "Standard"),
    QuestionCountOption(30, "30 Questions", "60-90 min", "Comprehensive"),
]


def get_subject(key: int | str) -> Subject:
    for subject in SUBJECTS:
        if str(subject.id) == str(key) or subject.name.lower() == str(key).strip().lower():
            return subject
    raise CatalogError(f"Unknown subject: {key}")


def get_difficulty(key: str) -> DifficultyTier:
    k = str(key or "").strip().lower()
    for tier in DIFFICULTY_LEVELS:
        if tier.id == k or tier.name.lower() == k:
            return tier
    raise CatalogError(f"Unknown difficulty: {key}")


def get_question_count(value: int | str) -> QuestionCountOption:
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise CatalogError(f"Invalid question count: {value}")
    for option in QUESTION_COUNTS:
        if option.value == v:
            return option
    raise CatalogError(f"Unsupported question count: {value}")


@dataclasses.dataclass(frozen=True)
class QuizConfig:
    subject: Subject
    difficulty: DifficultyTier
    question_count: QuestionCountOption

    @property
    def passing_score(self) -> int:
        return self.difficulty.passing_score

    @property
    def time_limit_seconds(self) -> int:
        return self.question_count.value * self.difficulty.minutes_per_question * 60

    def to_dict(self) -> JsonDict:
        return {
            "subject": self.subject.to_dict(),
            "difficulty": self.difficulty.to_dict(),
            "questionCount": self.question_count.to_dict(),
        }

    @staticmethod
    def from_dict(data: JsonDict) -> "QuizConfig":
        subject = t.cast(JsonDict, data.get("subject") or {})
        difficulty = t.cast(JsonDict, data.get("difficulty") or {})
        count = t.cast(JsonDict, data.get("questionCount") or {})
        return build_config(subject.get("id"), difficulty.get("id"), count.get("value"))


def build_config(subject: int | str | None, difficulty: str | None, question_count: int | str | None) -> QuizConfig:
    if subject is None or difficulty is None or question_count is None:
        raise CatalogError("subject, difficulty and questionCount are required")
    return QuizConfig(
        subject=get_subject(subject),
        difficulty=get_difficulty(difficulty),
        question_count=get_question_count(question_count),
    )


def catalog_payload() -> JsonDict:
    return {
        "subjects": [
            {"id": s.id, "name": s.name, "description": s.description, "topics": list(s.topics)}
            for s in SUBJECTS
        ],
        "difficulties": [
            {**d.to_dict(), "description": d.description}
            for d in DIFFICULTY_LEVELS
        ],
        "questionCounts": [
            {**q.to_dict(), "duration": q.duration, "difficulty": q.pace}
            for q in QUESTION_COUNTS
        ],
    }
