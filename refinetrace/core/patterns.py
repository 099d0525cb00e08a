"""Pattern catalog: named, fixed subsets of predicates used as splitters."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from .predicates import Predicate, PredicateCatalog
from ..engine.errors import RegistrationConflictError, UnknownPredicateError
from ..utils.logging_setup import get_logger


logger = get_logger(__name__)


class ConflictPolicy(Enum):
    """
    What to do when a name is re-registered with a different member set.
    
    In every case the first-registered member set is kept; the policies
    only differ in how loudly the divergence is reported.
    """
    IGNORE = "ignore"
    WARN = "warn"
    REJECT = "reject"


class RegistrationStatus(Enum):
    """Outcome of a single pattern registration."""
    CREATED = "created"
    EXISTING = "existing"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class Pattern:
    """
    A named, immutable set of predicates.
    
    members keeps the first-seen order of the predicates (duplicates
    dropped) so the refinement pass is deterministic; member_set is the
    same collection as a frozenset for membership tests.
    """
    name: str
    members: Tuple[Predicate, ...] = ()
    member_set: FrozenSet[Predicate] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        unique = tuple(dict.fromkeys(self.members))
        object.__setattr__(self, 'members', unique)
        object.__setattr__(self, 'member_set', frozenset(unique))

    def __contains__(self, predicate: object) -> bool:
        return predicate in self.member_set

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self) -> Iterator[Predicate]:
        return iter(self.members)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Registration:
    """Result of PatternCatalog.register()."""
    pattern: Pattern
    status: RegistrationStatus
    requested: FrozenSet[Predicate] = frozenset()

    @property
    def conflicted(self) -> bool:
        return self.status is RegistrationStatus.CONFLICT


class PatternCatalog:
    """
    Uniquing store for patterns, keyed by name.
    
    Re-registering a name never changes the stored member set. The
    conflict policy decides whether a differing request is ignored,
    logged and recorded in `conflicts`, or rejected with
    RegistrationConflictError.
    """

    def __init__(
        self,
        predicates: Optional[PredicateCatalog] = None,
        conflict_policy: ConflictPolicy = ConflictPolicy.WARN,
    ) -> None:
        """
        Initialize the catalog.
        
        Args:
            predicates: Catalog that must have issued every member; when
                None, members are not checked
            conflict_policy: Handling of conflicting re-registrations
        """
        self.predicates = predicates
        self.conflict_policy = ConflictPolicy(conflict_policy)
        self.conflicts: List[Registration] = []
        self._patterns: Dict[str, Pattern] = {}

    def get(self, name: str, members: Iterable[Predicate] = ()) -> Pattern:
        """Return the pattern registered under name, registering it if new."""
        return self.register(name, members).pattern

    def register(self, name: str, members: Iterable[Predicate] = ()) -> Registration:
        """
        Register a pattern and report what happened.
        
        Args:
            name: Unique pattern name
            members: Predicates in the pattern
            
        Returns:
            Registration with status CREATED, EXISTING or CONFLICT
            
        Raises:
            RegistrationConflictError: On a conflict under the REJECT policy
            UnknownPredicateError: If a member was not issued by the bound
                predicate catalog
        """
        members = tuple(members)
        requested = frozenset(members)
        existing = self._patterns.get(name)

        if existing is None:
            self._check_members(name, members)
            pattern = Pattern(name, members)
            self._patterns[name] = pattern
            logger.debug(f"Registered pattern {name} with {len(pattern)} members")
            return Registration(pattern, RegistrationStatus.CREATED, requested)

        if requested == existing.member_set:
            return Registration(existing, RegistrationStatus.EXISTING, requested)

        registration = Registration(existing, RegistrationStatus.CONFLICT, requested)
        stored_symbols = [p.symbol for p in existing.members]
        requested_symbols = [p.symbol for p in members]

        if self.conflict_policy is ConflictPolicy.REJECT:
            raise RegistrationConflictError(
                f"Pattern '{name}' is already registered with a different member set",
                name=name,
                stored=stored_symbols,
                requested=requested_symbols,
            )

        if self.conflict_policy is ConflictPolicy.WARN:
            self.conflicts.append(registration)
            logger.warning(
                f"Pattern '{name}' re-registered with a different member set; keeping original",
                extra={'extra_fields': {
                    'pattern': name,
                    'stored': sorted(stored_symbols),
                    'requested': sorted(requested_symbols),
                }}
            )

        return registration

    def sequence(self, names: Optional[Sequence[str]] = None) -> List[Pattern]:
        """
        Build an explicit processing order.
        
        Args:
            names: Pattern names in the order they should be applied; all
                registered patterns in registration order when omitted
            
        Raises:
            KeyError: If a name is not registered
        """
        if names is None:
            return list(self._patterns.values())
        missing = [n for n in names if n not in self._patterns]
        if missing:
            raise KeyError(f"Unknown pattern(s): {', '.join(missing)}")
        return [self._patterns[n] for n in names]

    def _check_members(self, name: str, members: Sequence[Predicate]) -> None:
        if self.predicates is None:
            return
        for predicate in members:
            if predicate not in self.predicates:
                raise UnknownPredicateError(
                    f"Pattern '{name}' references unregistered predicate {predicate!r}",
                    pattern=name,
                    predicate=getattr(predicate, 'representation', predicate),
                )

    def __getitem__(self, name: str) -> Pattern:
        return self._patterns[name]

    def __contains__(self, name: object) -> bool:
        return name in self._patterns

    def __iter__(self) -> Iterator[Pattern]:
        """Iterate over patterns in registration order (listing only)."""
        return iter(self._patterns.values())

    def __len__(self) -> int:
        return len(self._patterns)
