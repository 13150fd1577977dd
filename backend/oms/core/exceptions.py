"""
业务异常：服务层抛出，由 main.py 中的异常处理器统一映射为 HTTP 响应
"""


class OrderManagementError(Exception):
    """业务异常基类"""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(OrderManagementError):
    """订单或用户不存在"""

    status_code = 404


class UnauthorizedError(OrderManagementError):
    """已登录，但不是订单所有者"""

    status_code = 403


class InvalidStateError(OrderManagementError):
    """订单状态不允许当前操作（如修改非待处理订单、取消已送达订单）"""

    status_code = 400


class ConflictError(OrderManagementError):
    """唯一约束冲突，如订单号重复"""

    status_code = 409


class OrderValidationError(OrderManagementError):
    """请求校验之外的业务校验失败，如订单不含任何商品"""

    status_code = 400
