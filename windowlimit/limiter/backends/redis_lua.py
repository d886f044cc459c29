"""Redis Lua script for the fixed-window counter.

The whole get-or-create-and-decrement step runs server side in one
script, so concurrent requests from any number of processes see a valid
decrement sequence. The record is a hash with fields ``remaining``,
``total`` and ``reset`` (epoch milliseconds). A new window sets a
``PEXPIRE`` of one window length so idle identities are reclaimed.
"""

# KEYS[1]  record key (<namespace>:<identity>)
# ARGV[1]  max requests per window
# ARGV[2]  window length in milliseconds
# ARGV[3]  current time in epoch milliseconds
# Returns {remaining, total, reset}
FIXED_WINDOW_SCRIPT = """
    local key = KEYS[1]
    local max_requests = tonumber(ARGV[1])
    local duration = tonumber(ARGV[2])
    local now = tonumber(ARGV[3])

    local state = redis.call('HMGET', key, 'remaining', 'total', 'reset')
    local remaining = tonumber(state[1])
    local total = tonumber(state[2])
    local reset = tonumber(state[3])

    if remaining == nil or total == nil or reset == nil or reset <= now then
        remaining = max_requests
        total = max_requests
        reset = now + duration
        redis.call('HSET', key, 'remaining', remaining, 'total', total, 'reset', reset)
        redis.call('PEXPIRE', key, duration)
        return {remaining, total, reset}
    end

    if remaining > 0 then
        remaining = remaining - 1
        redis.call('HSET', key, 'remaining', remaining)
    end
    return {remaining, total, reset}
"""
