"""
异常定义

PlayError 及其子类均为可恢复错误：调用方提示玩家重新操作即可，
游戏状态不会因失败的出牌/过牌而改变。
"""


class ChoDaiDiError(Exception):
    """所有锄大D异常的基类"""


class CardParseError(ChoDaiDiError, ValueError):
    """牌记号无法解析"""


class IncomparableArity(ChoDaiDiError):
    """
    比较了张数类别不同的两个牌型 (如对子 vs 三条)

    校验流程不会触发此情况，出现即说明内部不变量被破坏
    """


class PlayError(ChoDaiDiError):
    """
    非法出牌/过牌

    Attributes:
        code: 错误类别名，供 I/O 层区分处理
    """
    code = "PlayError"


class InvalidArity(PlayError):
    """张数不是 1/2/3/5"""
    code = "InvalidArity"


class InvalidShape(PlayError):
    """张数正确但不成牌型"""
    code = "InvalidShape"


class NotOwned(PlayError):
    """出的牌不在自己手中"""
    code = "NotOwned"


class MustLeadOpeningCard(PlayError):
    """首轮必须由持有开局牌的玩家打出开局牌"""
    code = "MustLeadOpeningCard"


class ArityMismatch(PlayError):
    """跟牌张数与领出牌型不一致"""
    code = "ArityMismatch"


class DoesNotBeat(PlayError):
    """跟牌没有大过当前领出牌型"""
    code = "DoesNotBeat"


class CannotPassLeadingTrick(PlayError):
    """主动出牌时不能过"""
    code = "CannotPassLeadingTrick"


class NotYourTurn(PlayError):
    """还没轮到该玩家"""
    code = "NotYourTurn"


class GameAlreadyOver(PlayError):
    """游戏已结束"""
    code = "GameAlreadyOver"
