"""의존성 주입 컨테이너"""
from typing import Any, Callable, Dict, Type, TypeVar


T = TypeVar('T')

class DIContainer:
    """간단한 의존성 주입 컨테이너 (싱글톤 + 지연 생성 팩토리)"""

    def __init__(self):
        self._singletons: Dict[Type, Any] = {}
        self._factories: Dict[Type, Callable[[], Any]] = {}

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """싱글톤 인스턴스 등록"""
        self._singletons[interface] = implementation

    def register_lazy(self, interface: Type[T], factory_func: Callable[[], T]) -> None:
        """최초 조회 시 한 번만 생성되는 팩토리 등록"""
        self._factories[interface] = factory_func

    def is_registered(self, interface: Type) -> bool:
        return interface in self._singletons or interface in self._factories

    def get(self, interface: Type[T]) -> T:
        """서비스 인스턴스 조회"""
        if interface in self._singletons:
            return self._singletons[interface]

        if interface in self._factories:
            # 생성 실패 시 팩토리를 남겨 두어 다음 조회에서 다시 시도
            instance = self._factories[interface]()
            self._singletons[interface] = instance
            del self._factories[interface]
            return instance

        interface_name = getattr(interface, "__name__", repr(interface))
        raise ValueError(f"Service {interface_name} not registered")

    def reset(self) -> None:
        """등록 정보 전체 초기화 (테스트용)"""
        self._singletons.clear()
        self._factories.clear()

# 전역 컨테이너 인스턴스
container = DIContainer()
